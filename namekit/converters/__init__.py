"""File format converters for namekit."""

from namekit.converters.base import BaseConverter, ImageFormat
from namekit.converters.image import ImageConverter
from namekit.converters.service import ConversionService

__all__ = [
    "BaseConverter",
    "ImageFormat",
    "ImageConverter",
    "ConversionService",
]
