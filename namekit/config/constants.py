"""Constants for namekit."""

from pathlib import Path

# Application constants
APP_NAME = "namekit"

# Default paths
DEFAULT_LOG_DIR = ".logs"
DEFAULT_CONFIG_FILE = "namekit.yaml"
DEFAULT_PREFERENCES_FILE = str(Path.home() / ".config" / APP_NAME / "preferences.json")

# Key of the settings blob inside the preference store
SETTINGS_KEY = "AppSettings"

# API endpoints
GEMINI_ENDPOINT_TEMPLATE = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
OPENAI_CHAT_ENDPOINT = "https://api.openai.com/v1/chat/completions"

# Naming request settings
DEFAULT_NAMING_TIMEOUT = 60  # seconds
DEFAULT_MAX_IMAGE_BYTES = 4 * 1024 * 1024  # inline image cap
DEFAULT_INITIAL_JPEG_QUALITY = 80
DEFAULT_MIN_JPEG_QUALITY = 10
DEFAULT_JPEG_QUALITY_STEP = 10
DEFAULT_TEXT_EXCERPT_CHARS = 2000
DEFAULT_TEMPERATURE = 0.7

# Conversion settings
DEFAULT_CONVERSION_JPEG_QUALITY = 90
DEFAULT_FREE_SPACE_FACTOR = 2  # free space must be >= factor * source size

# Characters that may not appear in a suggested file name
ILLEGAL_FILENAME_CHARS = ':/\\?%*|"<>'

# Intermediate suffix used by the conversion service
CONVERTED_SUFFIX = "_converted"

CANCELLED_MESSAGE = "cancelled"

# Default prompt templates keyed by category value
DEFAULT_PROMPT_TEMPLATES = {
    "image": (
        "This is an image. Generate a short, descriptive file name for it "
        "without special characters."
    ),
    "text": (
        "This is a text file. Generate a short, descriptive file name based on "
        "its content without special characters."
    ),
}
