"""
Configuration management for KeyLeaks
Handles the advisory credential and scanning settings
"""
import json
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

from keyleaks.core.exceptions import ConfigurationError

API_KEY_ENV_VAR = "GEMINI_API_KEY"


@dataclass
class KeyLeaksConfig:
    """KeyLeaks configuration"""
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-pro"
    enable_real_time_scanning: bool = True
    scan_on_save: bool = True
    enable_sound_alerts: bool = True
    debounce_ms: int = 1000
    max_file_size: int = 1_000_000
    max_workspace_files: int = 1000
    advice_timeout_seconds: int = 30

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'KeyLeaksConfig':
        """
        Create from dictionary, ignoring keys this version doesn't know

        Raises:
            ConfigurationError: If a known key holds a value of the wrong type
        """
        known = {f.name for f in fields(cls)}
        return cls(**{k: _coerce(k, v) for k, v in data.items() if k in known})


def _coerce(key: str, value: Any) -> Any:
    """Coerce a CLI string or JSON value to the type of the field's default"""
    default = _FIELD_DEFAULTS[key]

    if default is None:
        # Optional fields: only these may be unset
        if value is None:
            return None
        if not isinstance(value, str):
            raise ConfigurationError(f"{key}: expected a string, got {value!r}", details={"key": key})
        return None if value.strip().lower() in ('', 'none', 'null') else value

    if isinstance(default, bool):
        if isinstance(value, bool):
            return value
        lowered = str(value).strip().lower()
        if lowered in ('1', 'true', 'yes', 'on'):
            return True
        if lowered in ('0', 'false', 'no', 'off'):
            return False
        raise ConfigurationError(f"{key}: expected a boolean, got {value!r}", details={"key": key})

    if isinstance(default, int):
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        if isinstance(value, str):
            try:
                return int(value)
            except ValueError:
                pass
        raise ConfigurationError(f"{key}: expected an integer, got {value!r}", details={"key": key})

    if not isinstance(value, str) or value.strip().lower() in ('', 'none', 'null'):
        raise ConfigurationError(f"{key}: expected a non-empty string, got {value!r}", details={"key": key})
    return value


_FIELD_DEFAULTS = {f.name: f.default for f in fields(KeyLeaksConfig)}


class ConfigManager:
    """Manages KeyLeaks configuration"""

    def __init__(self, config_path: Optional[Path] = None):
        """
        Initialize config manager

        Args:
            config_path: Path to config file (defaults to ~/.keyleaks/config.json)
        """
        if config_path is None:
            config_path = Path.home() / ".keyleaks" / "config.json"

        self.config_path = Path(config_path)
        self._config: Optional[KeyLeaksConfig] = None

    def load(self) -> KeyLeaksConfig:
        """Load configuration from file"""
        if self._config is not None:
            return self._config

        if not self.config_path.exists():
            self._config = KeyLeaksConfig()
            return self._config

        try:
            with open(self.config_path, 'r') as f:
                data = json.load(f)
            self._config = KeyLeaksConfig.from_dict(data if isinstance(data, dict) else {})
        except (json.JSONDecodeError, ConfigurationError, OSError):
            # Corrupted or ill-typed config: start fresh
            self._config = KeyLeaksConfig()
        return self._config

    def save(self, config: Optional[KeyLeaksConfig] = None) -> None:
        """
        Save configuration to file

        Args:
            config: Configuration to save (uses current if None)
        """
        if config is not None:
            self._config = config

        if self._config is None:
            raise ConfigurationError("No configuration to save")

        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, 'w') as f:
            json.dump(self._config.to_dict(), f, indent=2)

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value"""
        config = self.load()
        return getattr(config, key, default)

    def set(self, key: str, value: Any) -> None:
        """Set configuration value"""
        self.update(**{key: value})

    def update(self, **kwargs) -> None:
        """Update multiple configuration values"""
        config = self.load()
        for key, value in kwargs.items():
            if not hasattr(config, key):
                raise ConfigurationError(f"Invalid config key: {key}", details={"key": key})
            setattr(config, key, _coerce(key, value))
        self.save(config)

    def toggle(self, key: str) -> bool:
        """Flip a boolean setting and return the new value"""
        current = self.get(key)
        if not isinstance(current, bool):
            raise ConfigurationError(f"Config key is not a switch: {key}", details={"key": key})
        self.update(**{key: not current})
        return not current

    def clear(self) -> None:
        """Clear all configuration"""
        self._config = KeyLeaksConfig()
        self.save()

    def get_api_key(self) -> Optional[str]:
        """Get the advisory API key (from config or environment)"""
        key = self.get('gemini_api_key')
        if key:
            return key
        return os.getenv(API_KEY_ENV_VAR)

    def has_api_key(self) -> bool:
        """Check if an advisory API key is configured"""
        key = self.get_api_key()
        return bool(key and key.strip())
