"""Pytest configuration and fixtures."""

import pytest
import tempfile
from unittest.mock import Mock

from curriculum_monitor.models.data_models import (
    Category, CourseQualityRecord, LicensingExamRecord, MetricSnapshot,
    OutcomeRecord, TrendRecord
)
from curriculum_monitor.storage.memory_store import InMemoryRecordStore
from curriculum_monitor.utils.config import Config


def make_outcome(id="PLO 1", label="Medical knowledge", years=(85, 85, 85, 85, 85, 85),
                 employer=4.0, graduate=4.2):
    """Build an outcome record from six yearly values."""
    y1, y2, y3, y4, y5, y6 = years
    return OutcomeRecord(
        id=id, label=label, y1=y1, y2=y2, y3=y3, y4=y4, y5=y5, y6=y6,
        employer=employer, graduate=graduate
    )


def make_exam(label="NL1 (year 3)", pass_rate=90, mean_score=65, national_average=85):
    return LicensingExamRecord(
        label=label, pass_rate=pass_rate, mean_score=mean_score,
        national_average=national_average
    )


def make_course(label="Course 1", reliability=0.85, discrimination=0.35):
    return CourseQualityRecord(
        label=label, clo_achievement=85, reliability=reliability,
        difficulty=0.5, discrimination=discrimination, pass_rate=92
    )


def make_trend(year, licensing_pass):
    return TrendRecord(
        year=year, graduation=95, licensing_pass=licensing_pass,
        employer_score=4.1, retention=90
    )


@pytest.fixture
def mock_config():
    """Mock configuration for testing."""
    config = Mock(spec=Config)
    config.data_dir = "/tmp/curriculum-test"
    config.snapshot_cache_path = None
    config.users_path = None
    config.audit_log_limit = 100
    config.reset_code_ttl_minutes = 15
    config.min_password_length = 6
    config.bcrypt_rounds = 4
    config.output_format = "markdown"
    return config


@pytest.fixture
def healthy_snapshot():
    """Snapshot where no rule fires."""
    return MetricSnapshot(
        outcomes=[make_outcome("PLO 1"), make_outcome("PLO 2", "Communication")],
        licensing_exams=[make_exam()],
        courses=[make_course()],
        trends=[make_trend("2564", 88), make_trend("2565", 90), make_trend("2566", 91)],
    )


@pytest.fixture
def troubled_snapshot():
    """Snapshot that fires every rule at least once."""
    return MetricSnapshot(
        outcomes=[
            make_outcome("PLO 1", "Ethics", years=(60, 60, 60, 60, 60, 60), employer=3.0),
            make_outcome("PLO 2", "Teamwork", years=(90, 90, 90, 90, 90, 60)),
        ],
        licensing_exams=[make_exam("NL2 (year 5)", pass_rate=75, national_average=80)],
        courses=[make_course("Course 3", reliability=0.65, discrimination=0.15)],
        trends=[make_trend("2564", 92), make_trend("2565", 85), make_trend("2566", 88)],
    )


@pytest.fixture
def sample_rows():
    """Stored rows for every category."""
    return {
        Category.OUTCOME: [
            {"plo_id": "PLO 1", "plo_name": "Ethics", "y1": "80", "y2": "82", "y3": "84",
             "y4": "86", "y5": "88", "y6": "90", "employer": "4.1", "graduate": "4.3"},
        ],
        Category.LICENSING_EXAM: [
            {"exam_name": "NL1 (year 3)", "pass_rate": "91", "mean_score": "66", "national_avg": "84"},
        ],
        Category.COURSE_QUALITY: [
            {"course_name": "Course 1", "clo_achieve": "88", "reliability": "0.82",
             "difficulty": "0.55", "discrimination": "0.31", "pass_rate": "94"},
        ],
        Category.TREND: [
            {"year": "2564", "graduation": "94", "nl_pass": "90", "employer_score": "4.2", "retention": "88"},
            {"year": "2565", "graduation": "95", "nl_pass": "91", "employer_score": "4.3", "retention": "89"},
            {"year": "2566", "graduation": "96", "nl_pass": "92", "employer_score": "4.4", "retention": "90"},
        ],
    }


@pytest.fixture
def memory_store(sample_rows):
    """In-memory store seeded with sample rows."""
    return InMemoryRecordStore(sample_rows)


@pytest.fixture
def temp_data_dir():
    """Temporary data directory."""
    with tempfile.TemporaryDirectory() as data_dir:
        yield data_dir


@pytest.fixture(autouse=True)
def setup_test_environment(monkeypatch, tmp_path):
    """Setup test environment."""
    monkeypatch.setenv("LOG_FILE", str(tmp_path / "logs" / "curriculum_monitor.log"))
    monkeypatch.setenv("LOG_LEVEL", "ERROR")  # Reduce log noise in tests
    monkeypatch.setenv("BCRYPT_ROUNDS", "4")
    monkeypatch.setenv("MIN_PASSWORD_LENGTH", "6")
