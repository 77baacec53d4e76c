"""User settings blob and the preference store that persists it."""

import json
import os
import tempfile
from collections.abc import Callable
from enum import Enum
from pathlib import Path
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, Field, ValidationError, ValidationInfo, field_validator

from namekit.config.constants import (
    DEFAULT_PROMPT_TEMPLATES,
    DEFAULT_TEMPERATURE,
    SETTINGS_KEY,
)
from namekit.core.formats import (
    FileCategory,
    ImplementationMethod,
    declared_pairs,
    default_method,
    is_implemented_pair,
)
from namekit.exceptions import ConfigurationError
from namekit.naming.base import AIModel
from namekit.utils.logging import get_logger

log = get_logger(__name__)


class AppearanceMode(str, Enum):
    """Appearance preference."""

    LIGHT = "light"
    DARK = "dark"
    SYSTEM = "system"


class StyleMode(str, Enum):
    """Naming style, mapped to a sampling temperature."""

    PROFESSIONAL = "professional"
    NORMAL = "normal"
    CREATIVE = "creative"

    @property
    def temperature(self) -> float:
        return {"professional": 0.3, "normal": 0.7, "creative": 1.0}[self.value]


class FormatConversion(BaseModel):
    """Declarative source-format to target-format conversion rule."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    source_format: str
    target_format: str
    model: AIModel = AIModel.GEMINI_PRO
    prompt: str = ""
    implementation: str = ""
    selected_method: ImplementationMethod = ImplementationMethod.AI

    @classmethod
    def create(cls, source_format: str, target_format: str) -> "FormatConversion":
        """Build a rule with the default strategy and prompt for the pair."""
        method = default_method(source_format, target_format)
        return cls(
            source_format=source_format,
            target_format=target_format,
            prompt=f"Convert the file from {source_format} to {target_format}",
            implementation=method.value,
            selected_method=method,
        )

    @property
    def is_implemented(self) -> bool:
        """Whether the local converter can carry out this rule."""
        return is_implemented_pair(self.source_format, self.target_format)


class RenameRule(BaseModel):
    """Declarative per-category rename rule."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    name: str = ""
    file_type: FileCategory = FileCategory.IMAGE
    model: AIModel = AIModel.GEMINI_PRO
    prompt: str = ""
    implementation: str = ""
    selected_method: ImplementationMethod = ImplementationMethod.AI


def declared_conversions(implemented_only: bool = True) -> list[FormatConversion]:
    """Build the default conversion rule list from the format registry."""
    return [
        FormatConversion.create(source, target)
        for source, target in declared_pairs(implemented_only=implemented_only)
    ]


def _default_templates() -> dict[FileCategory, str]:
    return {FileCategory(key): value for key, value in DEFAULT_PROMPT_TEMPLATES.items()}


def _drop_unknown_keys(value: Any, key_type: type[Enum], field_name: str) -> Any:
    """Drop mapping entries whose key is not a member of ``key_type``."""
    if not isinstance(value, dict):
        return value

    known = {member.value for member in key_type} | set(key_type)
    cleaned = {}
    for key, item in value.items():
        if key in known:
            cleaned[key] = item
        else:
            log.warning("Dropping unknown settings key", field=field_name, key=str(key))
    return cleaned


class AppSettings(BaseModel):
    """The persisted settings blob."""

    appearance_mode: AppearanceMode = AppearanceMode.SYSTEM
    launch_at_login: bool = False

    ai_model: AIModel = AIModel.GEMINI_PRO
    api_keys: dict[AIModel, str] = Field(default_factory=dict)
    temperature: float = Field(default=DEFAULT_TEMPERATURE, ge=0.0, le=2.0)
    custom_endpoints: dict[AIModel, str] = Field(default_factory=dict)

    conversion_models: dict[FileCategory, AIModel] = Field(default_factory=dict)
    prompt_templates: dict[FileCategory, str] = Field(default_factory=_default_templates)
    format_conversions: list[FormatConversion] = Field(default_factory=declared_conversions)

    rename_rules: list[RenameRule] = Field(default_factory=list)

    @field_validator("api_keys", "custom_endpoints", mode="before")
    @classmethod
    def _validate_model_keys(cls, value: Any, info: ValidationInfo) -> Any:
        return _drop_unknown_keys(value, AIModel, info.field_name)

    @field_validator("conversion_models", "prompt_templates", mode="before")
    @classmethod
    def _validate_category_keys(cls, value: Any, info: ValidationInfo) -> Any:
        value = _drop_unknown_keys(value, FileCategory, info.field_name)
        if info.field_name == "conversion_models" and isinstance(value, dict):
            value = _drop_unknown_keys_in_values(value)
        return value

    def model_for(self, category: FileCategory) -> AIModel:
        """Model used for a category: per-category override, else the global model."""
        return self.conversion_models.get(category, self.ai_model)

    def api_key_for(self, model: AIModel) -> str | None:
        """Non-empty API key for a model, or None."""
        key = self.api_keys.get(model, "").strip()
        return key or None

    def endpoint_for(self, model: AIModel) -> str:
        """Custom endpoint for a model, else the model default."""
        return self.custom_endpoints.get(model) or model.api_endpoint

    def with_style(self, style: StyleMode) -> "AppSettings":
        """Copy of these settings using the temperature of a style."""
        return self.model_copy(update={"temperature": style.temperature})

    def to_blob(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible structure."""
        return self.model_dump(mode="json")

    @classmethod
    def from_blob(cls, blob: dict[str, Any]) -> "AppSettings":
        """Deserialize from a JSON-compatible structure."""
        return cls.model_validate(blob)


def _drop_unknown_keys_in_values(value: dict) -> dict:
    known_models = {member.value for member in AIModel} | set(AIModel)
    cleaned = {}
    for key, model in value.items():
        if model in known_models:
            cleaned[key] = model
        else:
            log.warning("Dropping unknown model override", category=str(key), model=str(model))
    return cleaned


SettingsListener = Callable[[AppSettings], None]


class SettingsStore:
    """Holds the current ``AppSettings`` and persists it under one key.

    The backing file is a JSON object that may contain other keys; only
    ``key`` is read and written. With ``path=None`` the store is memory-only.
    """

    def __init__(self, path: Path | str | None = None, key: str = SETTINGS_KEY) -> None:
        self.path = Path(path).expanduser() if path is not None else None
        self.key = key
        self._settings = AppSettings()
        self._listeners: list[SettingsListener] = []

    @classmethod
    def open(cls, path: Path | str | None, key: str = SETTINGS_KEY) -> "SettingsStore":
        """Create a store and load its current contents."""
        store = cls(path, key)
        store.load()
        return store

    @property
    def settings(self) -> AppSettings:
        """The current settings."""
        return self._settings

    def load(self) -> AppSettings:
        """Load settings from disk, falling back to defaults."""
        blob = self._read_all().get(self.key)
        if blob is None:
            self._settings = AppSettings()
            return self._settings

        try:
            self._settings = AppSettings.from_blob(blob)
        except ValidationError as e:
            self._settings = self._salvage(blob, e)
        return self._settings

    def _salvage(self, blob: Any, error: ValidationError) -> AppSettings:
        """Keep the valid fields of a blob; invalid ones take their defaults."""
        invalid = {err["loc"][0] for err in error.errors() if err["loc"]}
        if not isinstance(blob, dict) or not invalid:
            log.warning(
                "Settings blob invalid, using defaults", path=str(self.path), error=str(error)
            )
            return AppSettings()

        log.warning(
            "Invalid settings fields reset to defaults",
            path=str(self.path),
            fields=sorted(str(field) for field in invalid),
        )
        kept = {key: value for key, value in blob.items() if key not in invalid}
        try:
            return AppSettings.from_blob(kept)
        except ValidationError as e:
            log.warning("Settings blob invalid, using defaults", path=str(self.path), error=str(e))
            return AppSettings()

    def update(self, settings: AppSettings) -> None:
        """Replace the settings, persist them and notify subscribers."""
        self._settings = settings
        self._save()
        for listener in list(self._listeners):
            listener(settings)

    def modify(self, **changes: Any) -> AppSettings:
        """Update selected fields of the current settings."""
        updated = AppSettings.model_validate({**self._settings.model_dump(), **changes})
        self.update(updated)
        return updated

    def set_api_key(self, model: AIModel, api_key: str) -> AppSettings:
        """Store the API key for a model."""
        api_keys = dict(self._settings.api_keys)
        api_keys[model] = api_key
        return self.modify(api_keys=api_keys)

    def subscribe(self, listener: SettingsListener) -> Callable[[], None]:
        """Register a change listener; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _read_all(self) -> dict[str, Any]:
        if self.path is None or not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            log.warning("Preference store unreadable, using defaults", path=str(self.path), error=str(e))
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self) -> None:
        if self.path is None:
            return

        data = self._read_all()
        data[self.key] = self._settings.to_blob()

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            os.replace(tmp_name, self.path)
        except OSError as e:
            raise ConfigurationError(f"Cannot write preferences to {self.path}: {e}") from e

        log.debug("Settings saved", path=str(self.path))
