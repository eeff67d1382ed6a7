"""Validation utilities."""

import re
from pathlib import Path
from typing import Optional

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def validate_data_dir(data_dir: str) -> tuple[bool, Optional[str]]:
    """Validate a data directory.

    Args:
        data_dir: Directory holding category tables

    Returns:
        Tuple of (is_valid, error_message)
    """
    path = Path(data_dir).expanduser()
    if path.exists() and not path.is_dir():
        return False, f"Path is not a directory: {data_dir}"
    return True, None


def validate_csv_file(file_path: str) -> tuple[bool, Optional[str]]:
    """Validate a CSV import file."""
    path = Path(file_path)
    if not path.exists():
        return False, f"File not found: {file_path}"

    if not path.is_file():
        return False, f"Path is not a file: {file_path}"

    if path.suffix.lower() != ".csv":
        return False, "Import file must have .csv extension"

    return True, None


def validate_email(email: Optional[str]) -> tuple[bool, Optional[str]]:
    """Validate an email address."""
    if not email or not email.strip():
        return False, "Email is required"
    if not EMAIL_PATTERN.match(email.strip()):
        return False, f"Invalid email address: {email}"
    return True, None


def validate_password(password: Optional[str], min_length: int = 6) -> tuple[bool, Optional[str]]:
    """Validate a new password."""
    if not password:
        return False, "Password is required"
    if len(password) < min_length:
        return False, f"Password must be at least {min_length} characters"
    return True, None
