from typing import Any, Literal
import json
import os
from pydantic import BaseModel, Field
from loguru import logger

from .events.observer import Signal
from .probes.policy import ProbeRefreshPolicy, RefreshMode


# --- Settings Models ---
class GeneralSettings(BaseModel):
    debug_mode: bool = True
    log_dir: str = "logs"

class RunnerSettings(BaseModel):
    max_threads: int = Field(default=4, ge=1)

class ProbeSettings(BaseModel):
    # "always" re-checks on every menu open, matching the desktop app's behaviour
    refresh_policy: Literal["always", "once", "ttl"] = "always"
    ttl_seconds: float = Field(default=30.0, gt=0)
    timeout_seconds: float = Field(default=10.0, gt=0)

    def policy(self) -> ProbeRefreshPolicy:
        mode = RefreshMode(self.refresh_policy)
        if mode is RefreshMode.TTL:
            return ProbeRefreshPolicy.ttl(self.ttl_seconds)
        return ProbeRefreshPolicy(mode)

class MenuSettings(BaseModel):
    google_menu_enabled: bool = False
    extras_menu_enabled: bool = False

class AppConfig(BaseModel):
    general: GeneralSettings = Field(default_factory=GeneralSettings)
    runner: RunnerSettings = Field(default_factory=RunnerSettings)
    probes: ProbeSettings = Field(default_factory=ProbeSettings)
    menus: MenuSettings = Field(default_factory=MenuSettings)


# --- Manager ---
class ConfigManager:
    """
    Loads, validates and persists AppConfig; emits on_changed(section, key, value).
    """
    def __init__(self, filepath: str = "config.json"):
        self.filepath = filepath
        self._data = AppConfig()
        self.on_changed = Signal("ConfigChanged")
        self._load()

    @property
    def data(self) -> AppConfig:
        return self._data

    def update(self, section: str, key: str, value: Any):
        """Validate a single setting via Pydantic, autosave and emit on_changed."""
        if section not in AppConfig.model_fields:
            raise ValueError(f"Invalid section: {section}")

        section_obj = getattr(self._data, section)
        if key not in type(section_obj).model_fields:
            raise ValueError(f"Invalid key: {key} in section {section}")

        # Re-validate the whole section so constraints (ge/gt/Literal) apply
        candidate = section_obj.model_dump()
        candidate[key] = value
        validated = type(section_obj).model_validate(candidate)
        setattr(self._data, section, validated)

        self._save()
        self.on_changed.emit(section, key, getattr(validated, key))

    def get(self, section: str, key: str) -> Any:
        section_obj = getattr(self._data, section)
        return getattr(section_obj, key)

    def _load(self):
        """Load settings from JSON or TOML if present; otherwise write defaults."""
        if os.path.isfile(self.filepath):
            try:
                if self.filepath.endswith('.toml'):
                    import tomllib
                    with open(self.filepath, "rb") as f:
                        raw = tomllib.load(f)
                else:
                    with open(self.filepath, "r", encoding="utf-8") as f:
                        raw = json.load(f)
                self._data = AppConfig.model_validate(raw)
                logger.debug(f"Config loaded from {self.filepath}")
            except Exception as e:
                logger.error(f"Failed to load config from {self.filepath}: {e}")
                if not self.filepath.endswith('.toml'):
                    self._save()
        else:
            self._save()

    def _save(self):
        """Persist current config as JSON. TOML files are treated as read-only."""
        if self.filepath.endswith('.toml'):
            return
        try:
            dirname = os.path.dirname(self.filepath)
            if dirname:
                os.makedirs(dirname, exist_ok=True)
            with open(self.filepath, "w", encoding="utf-8") as f:
                json.dump(self._data.model_dump(), f, indent=4)
        except OSError as e:
            logger.error(f"Failed to save config to {self.filepath}: {e}")
