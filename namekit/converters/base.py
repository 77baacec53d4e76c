"""Base converter interface."""

from abc import ABC, abstractmethod
from enum import Enum
from pathlib import Path

from namekit.core.formats import normalize_extension


class ImageFormat(str, Enum):
    """Raster image formats known to the converters."""

    JPEG = "jpg"
    PNG = "png"
    GIF = "gif"
    WEBP = "webp"
    HEIC = "heic"
    TIFF = "tiff"

    @classmethod
    def from_extension(cls, extension: str) -> "ImageFormat | None":
        """Parse an extension, accepting ``jpeg`` and ``tif`` aliases."""
        ext = normalize_extension(extension)
        ext = {"jpeg": "jpg", "tif": "tiff"}.get(ext, ext)
        try:
            return cls(ext)
        except ValueError:
            return None

    @property
    def pillow_format(self) -> str:
        """Format name understood by Pillow's ``Image.save``."""
        return {"jpg": "JPEG"}.get(self.value, self.value.upper())


class BaseConverter(ABC):
    """Abstract base class for single-file format converters."""

    name: str = "base"

    @abstractmethod
    def can_convert(self, source_ext: str, target_ext: str) -> bool:
        """Check if this converter handles the source/target pair.

        Args:
            source_ext: Source extension, with or without dot
            target_ext: Target extension, with or without dot
        """
        pass

    @abstractmethod
    def convert(self, source: Path, destination: Path) -> None:
        """Convert ``source`` into a new file at ``destination``.

        Writes exactly one file on success and nothing on failure.

        Raises:
            UnsupportedFormatError: Pair not supported
            InvalidInputError: Source cannot be decoded
            ConversionFailedError: Encoding or writing failed
        """
        pass
