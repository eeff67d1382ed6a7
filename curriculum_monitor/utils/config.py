"""Configuration management."""

import os
from pathlib import Path
from typing import Any, Dict, Optional

from dotenv import load_dotenv


class Config:
    """Configuration manager."""

    def __init__(self, env_file: Optional[str] = None):
        """Initialize configuration.

        Args:
            env_file: Path to .env file
        """
        if env_file:
            load_dotenv(env_file)
        else:
            load_dotenv()

        self._config: Dict[str, Any] = {}
        self._load_config()

    def _load_config(self):
        """Load configuration from environment variables."""
        # Storage
        self._config["data_dir"] = os.getenv("DATA_DIR", "./data")
        self._config["snapshot_cache_path"] = os.getenv(
            "SNAPSHOT_CACHE_PATH", "./data/last_known_good.json"
        )
        self._config["users_path"] = os.getenv("USERS_PATH", "./data/users.json")
        self._config["audit_log_limit"] = int(os.getenv("AUDIT_LOG_LIMIT", "100"))

        # Logging
        self._config["log_level"] = os.getenv("LOG_LEVEL", "INFO")
        self._config["log_file"] = os.getenv("LOG_FILE", "./logs/curriculum_monitor.log")

        # Authentication
        self._config["reset_code_ttl_minutes"] = int(
            os.getenv("RESET_CODE_TTL_MINUTES", "15")
        )
        self._config["min_password_length"] = int(os.getenv("MIN_PASSWORD_LENGTH", "6"))
        self._config["bcrypt_rounds"] = int(os.getenv("BCRYPT_ROUNDS", "12"))

        # Reporting
        self._config["output_format"] = os.getenv("OUTPUT_FORMAT", "markdown")

    def get(self, key: str, default: Any = None) -> Any:
        """Get configuration value.

        Args:
            key: Configuration key
            default: Default value if key not found

        Returns:
            Configuration value
        """
        return self._config.get(key, default)

    def set(self, key: str, value: Any):
        """Set configuration value."""
        self._config[key] = value

    @property
    def data_dir(self) -> str:
        """Get data directory."""
        return str(Path(self._config["data_dir"]).expanduser())

    @property
    def snapshot_cache_path(self) -> str:
        """Get last-known-good snapshot path."""
        return str(Path(self._config["snapshot_cache_path"]).expanduser())

    @property
    def users_path(self) -> str:
        """Get user directory path."""
        return str(Path(self._config["users_path"]).expanduser())

    @property
    def audit_log_limit(self) -> int:
        return self._config["audit_log_limit"]

    @property
    def log_level(self) -> str:
        """Get log level."""
        return self._config["log_level"]

    @property
    def log_file(self) -> str:
        """Get log file path."""
        return self._config["log_file"]

    @property
    def reset_code_ttl_minutes(self) -> int:
        return self._config["reset_code_ttl_minutes"]

    @property
    def min_password_length(self) -> int:
        return self._config["min_password_length"]

    @property
    def bcrypt_rounds(self) -> int:
        return self._config["bcrypt_rounds"]

    @property
    def output_format(self) -> str:
        return self._config["output_format"]

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return self._config.copy()
