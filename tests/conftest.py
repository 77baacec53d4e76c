"""Pytest configuration and fixtures."""

from pathlib import Path

import pytest
from PIL import Image
from pillow_heif import register_heif_opener

from namekit.config import reload_settings
from namekit.config.preferences import AppSettings, SettingsStore
from namekit.naming.base import AIModel


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Keep logs and preferences of every test inside its tmp_path."""
    monkeypatch.setenv("NAMEKIT_LOG_DIR", str(tmp_path / ".logs"))
    monkeypatch.setenv("NAMEKIT_PREFERENCES_FILE", str(tmp_path / "preferences.json"))
    reload_settings()
    yield
    reload_settings()


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Directory holding the files a test works on."""
    work = tmp_path / "files"
    work.mkdir()
    return work


def _make_image(path: Path, size: tuple[int, int] = (32, 24), mode: str = "RGB") -> Path:
    color = (200, 40, 40, 128) if mode == "RGBA" else (200, 40, 40)
    Image.new(mode, size, color).save(path)
    return path


@pytest.fixture
def image_factory():
    """Factory writing a small solid image; the format follows the extension."""
    return _make_image


@pytest.fixture
def sample_jpg(temp_dir: Path) -> Path:
    """A small JPEG image named cat.jpg."""
    return _make_image(temp_dir / "cat.jpg")


@pytest.fixture
def sample_png(temp_dir: Path) -> Path:
    """A small PNG image with an alpha channel."""
    return _make_image(temp_dir / "logo.png", mode="RGBA")


@pytest.fixture
def sample_heic(temp_dir: Path) -> Path:
    """A small HEIC photo named beach.heic."""
    register_heif_opener()
    path = temp_dir / "beach.heic"
    Image.new("RGB", (64, 48), (30, 120, 200)).save(path, format="HEIF")
    return path


@pytest.fixture
def sample_text_file(temp_dir: Path) -> Path:
    """A short text file named note.txt."""
    file_path = temp_dir / "note.txt"
    file_path.write_text("Agenda: budget review, hiring plan, Q3 roadmap.\n", encoding="utf-8")
    return file_path


@pytest.fixture
def app_settings() -> AppSettings:
    """Settings with a Gemini key configured."""
    return AppSettings(api_keys={AIModel.GEMINI_PRO: "test-gemini-key"})


@pytest.fixture
def settings_store(app_settings: AppSettings) -> SettingsStore:
    """Memory-only settings store holding ``app_settings``."""
    store = SettingsStore(path=None)
    store.update(app_settings)
    return store
