"""Custom exceptions for namekit."""

from pathlib import Path


class NamekitError(Exception):
    """Base exception class for namekit."""

    pass


class ConfigurationError(NamekitError):
    """Configuration error."""

    pass


class StateError(NamekitError):
    """Invalid entry or run state transition."""

    pass


# =============================================================================
# Conversion errors
# =============================================================================


class ConversionError(NamekitError):
    """Error during file format conversion."""

    pass


class UnsupportedFormatError(ConversionError):
    """The source/target format pair is not supported."""

    def __init__(self, source_format: str, target_format: str) -> None:
        self.source_format = source_format
        self.target_format = target_format
        super().__init__(f"Unsupported conversion: {source_format or '?'} -> {target_format}")


class InvalidInputError(ConversionError):
    """The source file cannot be read or decoded."""

    def __init__(self, file_path: Path, cause: Exception | None = None) -> None:
        self.file_path = file_path
        self.cause = cause
        super().__init__(f"Cannot read source file: {file_path}")


class ConversionFailedError(ConversionError):
    """Encoding or writing the output failed."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Conversion failed: {reason}")


# =============================================================================
# Filesystem errors
# =============================================================================


class FileOperationError(NamekitError):
    """Error while moving, copying or deleting a file."""

    pass


class TargetExistsError(FileOperationError):
    """The destination file already exists."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Target file already exists: {path.name}")


class NoPermissionError(FileOperationError):
    """Access to a path was denied."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"No permission to access: {path}")


class InsufficientSpaceError(FileOperationError):
    """Not enough free disk space for the operation."""

    def __init__(self, required: int, available: int) -> None:
        self.required = required
        self.available = available
        super().__init__(f"Insufficient disk space: need {required} bytes, {available} available")


class TargetFolderNotWritableError(FileOperationError):
    """The destination folder is not writable."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Target folder is not writable: {path}")


class SourceMissingError(FileOperationError):
    """The source file no longer exists."""

    def __init__(self, path: Path) -> None:
        self.path = path
        super().__init__(f"Source file not found: {path}")


# =============================================================================
# Naming errors
# =============================================================================


class NamingError(NamekitError):
    """Error while requesting a name suggestion."""

    pass


class MissingCredentialError(NamingError):
    """No API key is configured for the model."""

    def __init__(self, model: str) -> None:
        self.model = model
        super().__init__(f"No API key configured for {model}")


class MissingTemplateError(NamingError):
    """No prompt template is configured for the file category."""

    def __init__(self, category: str) -> None:
        self.category = category
        super().__init__(f"No prompt template configured for category: {category}")


class InvalidEndpointError(NamingError):
    """The model endpoint is not a usable URL."""

    def __init__(self, url: str) -> None:
        self.url = url
        super().__init__(f"Invalid API endpoint: {url}")


class HttpStatusError(NamingError):
    """The API answered with a non-success status code."""

    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        super().__init__(f"HTTP error: {status_code}")


class EmptySuggestionError(NamingError):
    """The model did not return a usable file name."""

    def __init__(self, message: str = "Model returned no usable file name") -> None:
        super().__init__(message)


class InvalidResponseError(NamingError):
    """The API response body could not be parsed."""

    def __init__(self, message: str = "Invalid response from server") -> None:
        super().__init__(message)


class NetworkError(NamingError):
    """Transport-level failure talking to the API."""

    def __init__(self, cause: Exception) -> None:
        self.cause = cause
        super().__init__(f"Network error: {cause}")


class UnreadableInputError(NamingError):
    """File content could not be read for the request."""

    def __init__(self, file_path: Path, reason: str = "cannot read file content") -> None:
        self.file_path = file_path
        self.reason = reason
        super().__init__(f"Unreadable input {file_path.name}: {reason}")
