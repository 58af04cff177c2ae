import json
from pathlib import Path
from typing import Any

from loguru import logger

DEFAULT_CONFIG = {
    "compiler": "gams",
    # Compile only, no log echo to the console.
    "directives": ["action=c", "lo=0"],
    "listing_ext": "lst",
    # Source kinds the check is enabled for.
    "extensions": [".gms"],
    "debounce_seconds": 0.5,
    "log_file": "/tmp/gamscheck.log",
}


class ConfigManager:
    """
    User settings stored as JSON in ~/.gamscheck/config.json,
    layered over DEFAULT_CONFIG.
    """

    def __init__(self, config_dir: Path | None = None):
        self.config_dir = Path(config_dir) if config_dir else Path.home() / ".gamscheck"
        self.config_file = self.config_dir / "config.json"
        self.config = self.load_config()

    def load_config(self) -> dict:
        config = {key: (list(value) if isinstance(value, list) else value)
                  for key, value in DEFAULT_CONFIG.items()}
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning(f"Cannot create config directory {self.config_dir}: {e}")
            return config

        if not self.config_file.exists():
            return config

        try:
            user_config = json.loads(self.config_file.read_text())
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable config {self.config_file}: {e}")
            return config

        if isinstance(user_config, dict):
            config.update(user_config)
        return config

    def save_config(self):
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.config_file.write_text(json.dumps(self.config, indent=2))

    def get(self, key: str, default: Any = None) -> Any:
        return self.config.get(key, default)

    def set(self, key: str, value: Any):
        self.config[key] = value
        self.save_config()
