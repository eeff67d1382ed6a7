"""Test utility functions."""

import logging
import os
import tempfile
from pathlib import Path

from curriculum_monitor.utils.config import Config
from curriculum_monitor.utils.logging import get_logger, setup_logging
from curriculum_monitor.utils.validation import (
    validate_csv_file, validate_data_dir, validate_email, validate_password
)


class TestConfig:
    """Test configuration management."""

    def test_config_initialization_with_defaults(self):
        """Test config initialization with default values."""
        config = Config()

        assert config.get("log_level") == "ERROR"  # Set by test environment
        assert config.get("bcrypt_rounds") == 4
        assert config.get("reset_code_ttl_minutes") == 15
        assert isinstance(config.get("audit_log_limit"), int)

    def test_config_initialization_with_env_file(self, monkeypatch):
        """Test config initialization with environment file."""
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("DATA_DIR", raising=False)
        monkeypatch.delenv("AUDIT_LOG_LIMIT", raising=False)

        with tempfile.NamedTemporaryFile(mode='w', suffix='.env', delete=False) as f:
            f.write("LOG_LEVEL=DEBUG\n")
            f.write("DATA_DIR=/srv/curriculum\n")
            f.write("AUDIT_LOG_LIMIT=25\n")
            env_file = f.name

        try:
            config = Config(env_file)

            assert config.get("log_level") == "DEBUG"
            assert config.data_dir == "/srv/curriculum"
            assert config.audit_log_limit == 25
        finally:
            os.unlink(env_file)
            for key in ("LOG_LEVEL", "DATA_DIR", "AUDIT_LOG_LIMIT"):
                os.environ.pop(key, None)

    def test_config_get_set(self):
        """Test config get/set operations."""
        config = Config()

        assert config.get("nonexistent_key", "default") == "default"

        config.set("data_dir", "/tmp/other")
        assert config.data_dir == "/tmp/other"

    def test_config_properties(self):
        """Test config properties."""
        config = Config()

        assert "~" not in config.data_dir
        assert "~" not in config.users_path
        assert isinstance(config.min_password_length, int)
        assert isinstance(config.log_level, str)
        assert config.output_format == "markdown"

    def test_config_to_dict(self):
        """Test config serialization to dictionary."""
        config_dict = Config().to_dict()

        assert isinstance(config_dict, dict)
        assert "snapshot_cache_path" in config_dict


class TestLogging:
    """Test logging setup."""

    def test_setup_logging_console(self):
        logger = setup_logging(log_level="WARNING")

        assert logger.name == "curriculum_monitor"
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 1
        assert logger.propagate is False

    def test_setup_logging_file(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            log_file = Path(temp_dir) / "logs" / "monitor.log"
            logger = setup_logging(log_level="INFO", log_file=str(log_file), console_output=False)

            get_logger("engine").info("hello")
            for handler in logger.handlers:
                handler.flush()

            assert log_file.exists()
            assert "hello" in log_file.read_text()

            for handler in list(logger.handlers):
                handler.close()
                logger.removeHandler(handler)

    def test_get_logger_namespace(self):
        assert get_logger("storage").name == "curriculum_monitor.storage"


class TestValidation:
    """Test validation helpers."""

    def test_validate_data_dir(self, temp_data_dir):
        assert validate_data_dir(temp_data_dir) == (True, None)
        assert validate_data_dir(os.path.join(temp_data_dir, "new")) == (True, None)

        file_path = Path(temp_data_dir) / "file.txt"
        file_path.write_text("x")
        is_valid, error = validate_data_dir(str(file_path))
        assert not is_valid
        assert "not a directory" in error

    def test_validate_csv_file(self, temp_data_dir):
        csv_path = Path(temp_data_dir) / "plo.csv"
        csv_path.write_text("plo_id\n")
        txt_path = Path(temp_data_dir) / "plo.txt"
        txt_path.write_text("plo_id\n")

        assert validate_csv_file(str(csv_path)) == (True, None)
        assert validate_csv_file(str(txt_path))[0] is False
        assert validate_csv_file(temp_data_dir)[0] is False
        assert "not found" in validate_csv_file(str(Path(temp_data_dir) / "none.csv"))[1]

    def test_validate_email(self):
        assert validate_email("qa@med.edu") == (True, None)
        assert validate_email("")[0] is False
        assert validate_email("qa@med")[0] is False
        assert validate_email("q a@med.edu")[0] is False

    def test_validate_password(self):
        assert validate_password("secret1") == (True, None)
        assert validate_password(None)[1] == "Password is required"
        assert validate_password("abc", min_length=8)[1] == "Password must be at least 8 characters"
