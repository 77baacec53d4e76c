"""Format registry: extension categories and declared conversion rules."""

from enum import Enum


class FileCategory(str, Enum):
    """Coarse file-type grouping derived from the extension."""

    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"
    VIDEO = "video"
    OFFICE = "office"
    ARCHIVE = "archive"
    OTHER = "other"


class ImplementationMethod(str, Enum):
    """Strategy used to carry out a format conversion."""

    IMAGEMAGICK = "imagemagick"
    PDFKIT = "pdfkit"
    QUARTZ = "quartz"
    OPENAI_TTS = "openai-tts"
    GEMINI_VISION = "gemini-vision"
    LOCAL = "local"
    AI = "ai"


# (display name, extension) per category. The OTHER entry with an empty
# extension stands for "keep the original extension".
CATEGORY_EXTENSIONS: dict[FileCategory, tuple[tuple[str, str], ...]] = {
    FileCategory.TEXT: (
        ("Plain text", "txt"),
        ("Markdown", "md"),
        ("Rich text", "rtf"),
        ("Source code", "swift"),
        ("HTML", "html"),
    ),
    FileCategory.IMAGE: (
        ("PNG image", "png"),
        ("JPEG image", "jpg"),
        ("GIF image", "gif"),
        ("HEIC image", "heic"),
        ("WebP image", "webp"),
    ),
    FileCategory.AUDIO: (
        ("MP3 audio", "mp3"),
        ("WAV audio", "wav"),
        ("AAC audio", "aac"),
        ("Apple audio", "m4a"),
    ),
    FileCategory.VIDEO: (
        ("MP4 video", "mp4"),
        ("MOV video", "mov"),
        ("AVI video", "avi"),
        ("MKV video", "mkv"),
    ),
    FileCategory.OFFICE: (
        ("Word document", "docx"),
        ("Excel spreadsheet", "xlsx"),
        ("PowerPoint deck", "pptx"),
        ("PDF document", "pdf"),
        ("Pages document", "pages"),
        ("Numbers spreadsheet", "numbers"),
        ("Keynote deck", "key"),
    ),
    FileCategory.ARCHIVE: (
        ("ZIP archive", "zip"),
        ("RAR archive", "rar"),
        ("7Z archive", "7z"),
    ),
    FileCategory.OTHER: (("Keep extension", ""),),
}

# Reverse lookup built once; every extension belongs to exactly one category
_EXTENSION_INDEX: dict[str, FileCategory] = {
    ext: category
    for category, entries in CATEGORY_EXTENSIONS.items()
    for _, ext in entries
    if ext
}

# Raster formats the local image converter handles
IMPLEMENTED_IMAGE_FORMATS = frozenset({"jpg", "jpeg", "png", "gif", "tiff", "tif"})


def normalize_extension(extension: str) -> str:
    """Lower-case an extension and strip surrounding whitespace and a leading dot."""
    return extension.strip().lstrip(".").lower()


def category_of(extension: str) -> FileCategory:
    """Return the category for an extension.

    Total and case-insensitive; unknown extensions map to ``FileCategory.OTHER``.
    """
    return _EXTENSION_INDEX.get(normalize_extension(extension), FileCategory.OTHER)


def extensions_for(category: FileCategory) -> list[str]:
    """Return the non-empty extensions registered for a category."""
    return [ext for _, ext in CATEGORY_EXTENSIONS[category] if ext]


def all_extensions() -> list[str]:
    """Return every registered extension in table order."""
    return [ext for category in FileCategory for ext in extensions_for(category)]


def display_name(extension: str) -> str:
    """Human readable name for an extension, or the upper-cased extension."""
    ext = normalize_extension(extension)
    for entries in CATEGORY_EXTENSIONS.values():
        for name, candidate in entries:
            if candidate == ext:
                return name
    return ext.upper() or "Keep extension"


def available_methods(source: str, target: str) -> list[ImplementationMethod]:
    """List the conversion strategies for a source/target pair.

    The first entry is the default choice.
    """
    pair = (category_of(source), category_of(target))
    image = FileCategory.IMAGE

    if pair == (image, image):
        return [ImplementationMethod.IMAGEMAGICK, ImplementationMethod.LOCAL, ImplementationMethod.AI]
    if pair == (FileCategory.OFFICE, FileCategory.TEXT):
        return [ImplementationMethod.PDFKIT, ImplementationMethod.LOCAL, ImplementationMethod.AI]
    if pair == (FileCategory.TEXT, FileCategory.OFFICE):
        return [ImplementationMethod.QUARTZ, ImplementationMethod.LOCAL, ImplementationMethod.AI]
    if pair == (FileCategory.TEXT, FileCategory.AUDIO):
        return [ImplementationMethod.OPENAI_TTS, ImplementationMethod.AI]
    if image in pair:
        return [ImplementationMethod.GEMINI_VISION, ImplementationMethod.AI]
    return [ImplementationMethod.AI]


def default_method(source: str, target: str) -> ImplementationMethod:
    """Default conversion strategy for a pair."""
    return available_methods(source, target)[0]


def is_implemented_pair(source: str, target: str) -> bool:
    """Check whether the local converter actually handles a pair."""
    return (
        normalize_extension(source) in IMPLEMENTED_IMAGE_FORMATS
        and normalize_extension(target) in IMPLEMENTED_IMAGE_FORMATS
    )


def declared_pairs(implemented_only: bool = True) -> list[tuple[str, str]]:
    """Enumerate source/target pairs for the default rule list.

    Args:
        implemented_only: Only return pairs the local converter implements.
            When False, every pairwise combination of registered extensions
            is returned (including identity pairs).

    Returns:
        List of (source, target) extension tuples in table order
    """
    extensions = all_extensions()
    if not implemented_only:
        return [(source, target) for source in extensions for target in extensions]

    return [
        (source, target)
        for source in extensions
        for target in extensions
        if source != target and is_implemented_pair(source, target)
    ]
