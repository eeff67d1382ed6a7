"""Utility modules."""

from .config import Config
from .logging import setup_logging, get_logger
from .validation import (
    validate_csv_file,
    validate_data_dir,
    validate_email,
    validate_password,
)

__all__ = [
    "Config",
    "setup_logging",
    "get_logger",
    "validate_csv_file",
    "validate_data_dir",
    "validate_email",
    "validate_password",
]
