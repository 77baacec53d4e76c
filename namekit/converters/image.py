"""Local raster image converter using Pillow."""

import io
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from namekit.config.constants import DEFAULT_CONVERSION_JPEG_QUALITY
from namekit.converters.base import BaseConverter, ImageFormat
from namekit.exceptions import ConversionFailedError, InvalidInputError, UnsupportedFormatError
from namekit.utils.logging import get_logger

log = get_logger(__name__)


class ImageConverter(BaseConverter):
    """Re-encode JPEG, PNG, GIF and TIFF images into one another."""

    name = "image"

    supported_formats = frozenset({ImageFormat.JPEG, ImageFormat.PNG, ImageFormat.GIF, ImageFormat.TIFF})

    def __init__(self, jpeg_quality: int = DEFAULT_CONVERSION_JPEG_QUALITY) -> None:
        self.jpeg_quality = jpeg_quality

    def can_convert(self, source_ext: str, target_ext: str) -> bool:
        source = ImageFormat.from_extension(source_ext)
        target = ImageFormat.from_extension(target_ext)
        return source in self.supported_formats and target in self.supported_formats

    def convert(self, source: Path, destination: Path) -> None:
        if not self.can_convert(source.suffix, destination.suffix):
            raise UnsupportedFormatError(source.suffix.lstrip("."), destination.suffix.lstrip("."))

        target = ImageFormat.from_extension(destination.suffix) or ImageFormat.PNG

        try:
            with Image.open(source) as img:
                img.load()
                data = self._encode(img, target)
        except (FileNotFoundError, UnidentifiedImageError) as e:
            raise InvalidInputError(source, e) from e
        except ConversionFailedError:
            raise
        except (OSError, ValueError) as e:
            # Decoding errors surface from img.load()
            raise InvalidInputError(source, e) from e

        try:
            with open(destination, "xb") as f:
                f.write(data)
        except FileExistsError as e:
            raise ConversionFailedError(f"output already exists: {destination.name}") from e
        except OSError as e:
            destination.unlink(missing_ok=True)
            raise ConversionFailedError(str(e)) from e

        log.debug(
            "Image converted",
            source=str(source),
            destination=str(destination),
            size=len(data),
        )

    def _encode(self, img: Image.Image, target: ImageFormat) -> bytes:
        """Encode into memory so a failure never leaves a partial file."""
        if target == ImageFormat.JPEG:
            img = self._flatten(img)

        buffer = io.BytesIO()
        try:
            if target == ImageFormat.JPEG:
                img.save(buffer, format=target.pillow_format, quality=self.jpeg_quality)
            else:
                img.save(buffer, format=target.pillow_format)
        except (OSError, ValueError, KeyError) as e:
            log.error("Pillow encode failed", target=target.value, error=str(e))
            raise ConversionFailedError(f"cannot encode {target.value}: {e}") from e

        data = buffer.getvalue()
        if not data:
            raise ConversionFailedError("encoder produced no data")
        return data

    def _flatten(self, img: Image.Image) -> Image.Image:
        """Convert to RGB, compositing any alpha channel on white."""
        if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
            rgba = img.convert("RGBA")
            background = Image.new("RGB", rgba.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.split()[3])
            return background
        if img.mode != "RGB":
            return img.convert("RGB")
        return img
