"""JPEG payload compression for inline image upload."""

import io
from dataclasses import dataclass
from pathlib import Path

from PIL import Image, UnidentifiedImageError
from pillow_heif import register_heif_opener

from namekit.config.constants import (
    DEFAULT_INITIAL_JPEG_QUALITY,
    DEFAULT_JPEG_QUALITY_STEP,
    DEFAULT_MAX_IMAGE_BYTES,
    DEFAULT_MIN_JPEG_QUALITY,
)
from namekit.exceptions import UnreadableInputError
from namekit.utils.logging import get_logger

log = get_logger(__name__)

# HEIC photos are decoded through the pillow-heif plugin
register_heif_opener()


@dataclass
class CompressionConfig:
    """Configuration for payload compression."""

    max_bytes: int = DEFAULT_MAX_IMAGE_BYTES
    initial_quality: int = DEFAULT_INITIAL_JPEG_QUALITY
    min_quality: int = DEFAULT_MIN_JPEG_QUALITY
    quality_step: int = DEFAULT_JPEG_QUALITY_STEP


@dataclass
class CompressedImage:
    """Result of payload compression."""

    data: bytes
    quality: int
    width: int
    height: int
    original_size: int

    @property
    def compressed_size(self) -> int:
        return len(self.data)

    @property
    def compression_ratio(self) -> float:
        """Compressed size over original size (0-1, lower is better)."""
        if self.original_size == 0:
            return 1.0
        return self.compressed_size / self.original_size


class ImageCompressor:
    """Re-encode images as JPEG under a byte cap.

    The image is encoded once at ``initial_quality``. While the result is over
    ``max_bytes`` the quality is lowered by ``quality_step`` and the image is
    re-encoded, stopping once the quality would drop to ``min_quality`` or below.
    """

    def __init__(self, config: CompressionConfig | None = None) -> None:
        self.config = config or CompressionConfig()

    def compress_file(self, path: Path) -> CompressedImage:
        """Load and compress an image file.

        Raises:
            UnreadableInputError: If the file cannot be read or decoded, or
                cannot be brought under the byte cap
        """
        try:
            raw = path.read_bytes()
        except OSError as e:
            raise UnreadableInputError(path, str(e)) from e

        return self.compress_bytes(raw, path)

    def compress_bytes(self, raw: bytes, path: Path) -> CompressedImage:
        """Compress already loaded image bytes; ``path`` is used for errors and logs."""
        try:
            img = Image.open(io.BytesIO(raw))
            img.load()
        except (UnidentifiedImageError, OSError, ValueError) as e:
            raise UnreadableInputError(path, "cannot decode image") from e

        img = self._to_rgb(img)

        quality = self.config.initial_quality
        data = self._encode(img, quality)
        while len(data) > self.config.max_bytes and quality > self.config.min_quality:
            quality = max(quality - self.config.quality_step, self.config.min_quality)
            data = self._encode(img, quality)

        if len(data) > self.config.max_bytes:
            raise UnreadableInputError(
                path,
                f"image exceeds {self.config.max_bytes} bytes even at quality {quality}",
            )

        log.debug(
            "Image payload prepared",
            filename=path.name,
            original_size=len(raw),
            compressed_size=len(data),
            quality=quality,
        )

        return CompressedImage(
            data=data,
            quality=quality,
            width=img.size[0],
            height=img.size[1],
            original_size=len(raw),
        )

    def _to_rgb(self, img: Image.Image) -> Image.Image:
        """Flatten alpha on white; JPEG has no alpha channel."""
        if img.mode in ("RGBA", "LA") or (img.mode == "P" and "transparency" in img.info):
            rgba = img.convert("RGBA")
            background = Image.new("RGB", rgba.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.split()[3])
            return background
        if img.mode != "RGB":
            return img.convert("RGB")
        return img

    def _encode(self, img: Image.Image, quality: int) -> bytes:
        output = io.BytesIO()
        img.save(output, format="JPEG", quality=quality, optimize=True)
        return output.getvalue()
