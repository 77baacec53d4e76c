"""Image payload preparation for naming requests."""

from namekit.image.compressor import CompressedImage, CompressionConfig, ImageCompressor

__all__ = [
    "ImageCompressor",
    "CompressionConfig",
    "CompressedImage",
]
