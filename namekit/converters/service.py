"""Conversion service: picks a converter and places the output file."""

from pathlib import Path

from namekit.config.constants import CONVERTED_SUFFIX, DEFAULT_CONVERSION_JPEG_QUALITY
from namekit.converters.base import BaseConverter, ImageFormat
from namekit.converters.image import ImageConverter
from namekit.core.formats import normalize_extension
from namekit.exceptions import UnsupportedFormatError
from namekit.utils.fs import get_unique_path
from namekit.utils.logging import get_logger

log = get_logger(__name__)


class ConversionService:
    """Routes a conversion to the first converter that supports the pair."""

    def __init__(self, converters: list[BaseConverter] | None = None) -> None:
        self.converters: list[BaseConverter] = (
            converters
            if converters is not None
            else [ImageConverter(jpeg_quality=DEFAULT_CONVERSION_JPEG_QUALITY)]
        )

    def can_convert(self, source_ext: str, target_ext: str) -> bool:
        """Check whether any converter supports the pair."""
        return self.get_converter(source_ext, target_ext) is not None

    def get_converter(self, source_ext: str, target_ext: str) -> BaseConverter | None:
        """Return the first converter supporting the pair, if any."""
        for converter in self.converters:
            if converter.can_convert(source_ext, target_ext):
                return converter
        return None

    def supported_output_formats(self, source_ext: str) -> list[ImageFormat]:
        """Image formats the given source extension can be converted to."""
        return [fmt for fmt in ImageFormat if self.can_convert(source_ext, fmt.value)]

    def output_path_for(self, source: Path, target_ext: str) -> Path:
        """Collision-free ``<stem>_converted[_N].<ext>`` path next to ``source``."""
        ext = normalize_extension(target_ext)
        preferred = source.parent / f"{source.stem}{CONVERTED_SUFFIX}.{ext}"
        return get_unique_path(preferred)

    def convert(self, source: Path, target_ext: str) -> Path:
        """Convert ``source`` to ``target_ext`` in the source directory.

        Args:
            source: File to convert
            target_ext: Target extension, with or without dot

        Returns:
            Path of the newly written file

        Raises:
            UnsupportedFormatError: No converter supports the pair
            InvalidInputError: Source cannot be decoded
            ConversionFailedError: Encoding or writing failed
        """
        source_ext = normalize_extension(source.suffix)
        converter = self.get_converter(source_ext, target_ext)
        if converter is None:
            raise UnsupportedFormatError(source_ext, normalize_extension(target_ext))

        output = self.output_path_for(source, target_ext)
        log.info(
            "Converting file",
            source=str(source),
            output=str(output),
            converter=converter.name,
        )
        converter.convert(source, output)
        return output
