"""
Settings Manager.

Converter preferences stored as JSON: XML output options, import
strictness, the fallback format for unknown extensions and a list of
recently used topology files.
"""

import json
import logging
import os
import platform
from dataclasses import dataclass, field, asdict, fields
from typing import Optional
from pathlib import Path


logger = logging.getLogger(__name__)

# Overrides the settings file location when no explicit path is given
CONFIG_ENV_VAR = "TOPOCODEC_CONFIG"


@dataclass
class XMLSettings:
    """XML export options."""
    indent: str = "  "            # "" writes the document on one line
    xml_declaration: bool = True


@dataclass
class ParseSettings:
    """Import behavior shared by all formats."""
    strict: bool = False  # raise on the first malformed node/link instead of skipping it


@dataclass
class PathSettings:
    """File handling settings."""
    default_format: str = "xml"   # used for unrecognized file extensions
    last_open_dir: str = ""
    last_save_dir: str = ""


# JSON key -> section type
SECTIONS = {
    "xml": XMLSettings,
    "parsing": ParseSettings,
    "paths": PathSettings,
}


@dataclass
class AppSettings:
    """All converter settings."""
    xml: XMLSettings = field(default_factory=XMLSettings)
    parsing: ParseSettings = field(default_factory=ParseSettings)
    paths: PathSettings = field(default_factory=PathSettings)
    recent_files: list = field(default_factory=list)
    recent_files_max: int = 10

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "AppSettings":
        """Build settings from parsed JSON. Unknown sections and keys are ignored."""
        settings = cls()
        for key, section in SECTIONS.items():
            values = data.get(key)
            if isinstance(values, dict):
                known = {f.name for f in fields(section)}
                setattr(settings, key, section(**{k: v for k, v in values.items() if k in known}))
        settings.recent_files = [str(p) for p in data.get("recent_files", [])]
        settings.recent_files_max = int(data.get("recent_files_max", settings.recent_files_max))
        return settings


def default_settings_path(app_name: str, filename: str) -> Path:
    """
    Platform settings location:
    - Windows: %APPDATA%/<app>/<file>
    - macOS: ~/Library/Application Support/<app>/<file>
    - Linux: $XDG_CONFIG_HOME/<app>/<file> (~/.config by default)
    """
    system = platform.system()
    if system == "Windows":
        root = Path(os.environ.get("APPDATA", Path.home()))
    elif system == "Darwin":
        root = Path.home() / "Library" / "Application Support"
    else:
        root = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    return root / app_name / filename


class SettingsManager:
    """
    Loads and saves AppSettings.

    The file is read once on construction; nothing is written until a
    setter, save(), reset() or the recent-file list changes.

    Args:
        config_override: Settings file to use instead of the environment
            variable or the platform location
    """

    APP_NAME = "TopoCodec"
    SETTINGS_FILE = "settings.json"

    def __init__(self, config_override: Optional[str] = None):
        self._settings = AppSettings()
        self._settings_path = Path(
            config_override
            or os.environ.get(CONFIG_ENV_VAR)
            or default_settings_path(self.APP_NAME, self.SETTINGS_FILE)
        )
        self.load()

    @property
    def settings(self) -> AppSettings:
        return self._settings

    @property
    def settings_path(self) -> str:
        return str(self._settings_path)

    @property
    def default_format(self) -> str:
        return self._settings.paths.default_format

    @default_format.setter
    def default_format(self, value: str):
        self._settings.paths.default_format = value
        self.save()

    @property
    def strict(self) -> bool:
        return self._settings.parsing.strict

    @strict.setter
    def strict(self, value: bool):
        self._settings.parsing.strict = value
        self.save()

    def load(self) -> bool:
        """Read the settings file. A missing or unreadable file keeps the current settings."""
        if not self._settings_path.is_file():
            return False
        try:
            data = json.loads(self._settings_path.read_text(encoding="utf-8"))
            self._settings = AppSettings.from_dict(data)
        except (OSError, ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Ignoring settings file {self._settings_path}: {e}")
            return False
        logger.debug(f"Loaded settings from {self._settings_path}")
        return True

    def save(self) -> bool:
        try:
            self._settings_path.parent.mkdir(parents=True, exist_ok=True)
            self._settings_path.write_text(
                json.dumps(self._settings.to_dict(), indent=2), encoding="utf-8"
            )
        except OSError as e:
            logger.warning(f"Could not save settings to {self._settings_path}: {e}")
            return False
        return True

    def reset(self):
        self._settings = AppSettings()
        self.save()

    def add_recent_file(self, file_path: str):
        """Move file_path to the front of the recent list, keeping at most recent_files_max."""
        recent = [p for p in self._settings.recent_files if p != file_path]
        recent.insert(0, file_path)
        self._settings.recent_files = recent[:self._settings.recent_files_max]
        self.save()

    def get_recent_files(self) -> list:
        """Recent files that still exist. Vanished entries are dropped from the settings."""
        existing = [p for p in self._settings.recent_files if os.path.exists(p)]
        if existing != self._settings.recent_files:
            self._settings.recent_files = existing
            self.save()
        return existing


_settings_manager: Optional[SettingsManager] = None


def get_settings(config_override: Optional[str] = None) -> SettingsManager:
    """
    Get the process-wide settings manager.

    config_override only applies to the call that creates it.
    """
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager(config_override)
    return _settings_manager


def reset_settings_manager():
    """Forget the process-wide settings manager (used by tests)."""
    global _settings_manager
    _settings_manager = None
