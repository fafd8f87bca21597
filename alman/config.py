import json
import logging
from pathlib import Path
from typing import Dict, Any, Optional

from alman.errors import ConfigIOError, InvalidInputError

logger = logging.getLogger(__name__)

VALUE_KINDS = {
    bool: "true or false",
    int: "a whole number",
    str: "a string",
}
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class Config:
    """Manage alman configuration and highlight themes"""

    THEMES = {
        "default": {
            "highlight_color": "bold red",
            "success_color": "green",
            "error_color": "red",
            "warning_color": "yellow",
        },
        "ocean": {
            "highlight_color": "bold bright_cyan",
            "success_color": "green",
            "error_color": "bright_red",
            "warning_color": "bright_yellow",
        },
        "forest": {
            "highlight_color": "bold bright_yellow",
            "success_color": "bright_green",
            "error_color": "red",
            "warning_color": "yellow",
        },
        "monochrome": {
            "highlight_color": "bold underline",
            "success_color": "white",
            "error_color": "bright_white",
            "warning_color": "white",
        },
    }

    DEFAULT_CONFIG = {
        "theme": "default",
        "auto_backup": False,
        "max_backups": 10,
        "bashrc": ".bashrc",
        "gitconfig": ".gitconfig",
        "log_level": "WARNING",
    }

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = config_dir or Path.home() / ".alman"
        self.config_path = self.config_dir / "config.json"
        self.backup_dir = self.config_dir / "backups"
        self.config = self.load()

    @classmethod
    def validate(cls, key: str, value: Any) -> Any:
        """Return value if it is usable for key, raise InvalidInputError otherwise

        The value must have the type of the key's default (``true`` is not a
        number here). ``theme``, ``max_backups``, ``log_level`` and the file
        names are also checked for range.
        """
        if key not in cls.DEFAULT_CONFIG:
            raise InvalidInputError(f"Unknown setting '{key}'")

        expected = type(cls.DEFAULT_CONFIG[key])
        if type(value) is not expected:
            raise InvalidInputError(
                f"Setting '{key}' expects {VALUE_KINDS[expected]}, got {json.dumps(value)}"
            )

        if key == "theme" and value not in cls.THEMES:
            raise InvalidInputError(
                f"Unknown theme '{value}'. Choose one of: {', '.join(cls.THEMES)}"
            )
        if key == "max_backups" and value < 1:
            raise InvalidInputError("Setting 'max_backups' must be at least 1")
        if key == "log_level" and value.upper() not in LOG_LEVELS:
            raise InvalidInputError(
                f"Unknown log level '{value}'. Choose one of: {', '.join(LOG_LEVELS)}"
            )
        if key in ("bashrc", "gitconfig") and not value.strip():
            raise InvalidInputError(f"Setting '{key}' cannot be empty")
        return value

    def load(self) -> Dict[str, Any]:
        """Load configuration from file over the defaults

        Settings that would not pass ``validate`` are dropped with a warning,
        so a hand-edited file never stops alman from starting.
        """
        config = self.DEFAULT_CONFIG.copy()
        if not self.config_path.exists():
            return config

        try:
            with open(self.config_path, 'r') as f:
                user_config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable config %s: %s", self.config_path, e)
            return config
        if not isinstance(user_config, dict):
            logger.warning("Ignoring config %s: not a JSON object", self.config_path)
            return config

        for key, value in user_config.items():
            try:
                config[key] = self.validate(key, value)
            except InvalidInputError as e:
                logger.warning("Ignoring setting in %s: %s", self.config_path, e)
        return config

    def save(self) -> None:
        """Save configuration to file"""
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, 'w') as f:
                json.dump(self.config, f, indent=2)
        except OSError as e:
            raise ConfigIOError(f"Cannot write {self.config_path}: {e.strerror or e}") from e

    def get(self, key: str, default: Any = None) -> Any:
        return self.config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Validate and store one setting"""
        self.config[key] = self.validate(key, value)
        self.save()

    def get_theme(self) -> Dict[str, str]:
        return self.THEMES.get(self.config.get("theme"), self.THEMES["default"])

    @property
    def highlight_style(self) -> str:
        return self.get_theme()["highlight_color"]
