"""Data models for the curriculum monitor."""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator


OUTCOME_TARGET = 80.0

# Validation context flag: numeric fields take only int or float values.
STRICT_NUMBERS = "strict_numbers"


class Category(str, Enum):
    """Record categories held by the persistence layer."""
    OUTCOME = "outcome"
    LICENSING_EXAM = "licensingExam"
    COURSE_QUALITY = "courseQuality"
    TREND = "trend"


class Severity(str, Enum):
    """Finding severity levels."""
    CRITICAL = "Critical"
    NEEDS_IMPROVEMENT = "NeedsImprovement"
    QUALITY_ISSUE = "QualityIssue"
    DECLINING_TREND = "DecliningTrend"


class Priority(str, Enum):
    """Action item priorities."""
    URGENT = "Urgent"
    IMPORTANT = "Important"


class OverallStatus(str, Enum):
    """Program-level status labels."""
    EXCELLENT = "Excellent"
    GOOD = "Good"
    NEEDS_IMPROVEMENT = "NeedsImprovement"
    CRITICAL = "Critical"


class Role(str, Enum):
    """User roles."""
    CHAIR = "CHAIR"
    FACULTY = "FACULTY"
    QA = "QA"
    ADMIN = "ADMIN"


class _Record(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    @field_validator("*", mode="before")
    @classmethod
    def numbers_only(cls, v, info: ValidationInfo):
        """Reject bools and numeric text when validating with strict numbers.

        Rows read from spreadsheets are validated without the flag, so their
        numeric text is still parsed.
        """
        if not (info.context and info.context.get(STRICT_NUMBERS)):
            return v
        if cls.model_fields[info.field_name].annotation is not float:
            return v
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            raise ValueError(f"expected a number, got {type(v).__name__}")
        return v


class OutcomeRecord(_Record):
    """Program learning outcome achievement by academic year."""
    id: str = Field(..., min_length=1)
    label: str
    y1: float
    y2: float
    y3: float
    y4: float
    y5: float
    y6: float
    employer: float
    graduate: float
    target: float = OUTCOME_TARGET

    @property
    def yearly(self) -> Tuple[float, ...]:
        """Achievement percentages for years 1 through 6."""
        return (self.y1, self.y2, self.y3, self.y4, self.y5, self.y6)


class LicensingExamRecord(_Record):
    """National licensing exam results."""
    label: str
    pass_rate: float
    mean_score: float
    national_average: float


class CourseQualityRecord(_Record):
    """Course outcome and assessment psychometrics."""
    label: str
    clo_achievement: float
    reliability: float = Field(..., ge=0.0, le=1.0)
    difficulty: float = Field(..., ge=0.0, le=1.0)
    discrimination: float = Field(..., ge=-1.0, le=1.0)
    pass_rate: float


class TrendRecord(_Record):
    """Program indicators for one academic year."""
    year: str
    graduation: float
    licensing_pass: float
    employer_score: float
    retention: float

    @field_validator('year', mode='before')
    @classmethod
    def year_as_label(cls, v):
        """Accept numeric years from spreadsheets."""
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(int(v))
        return v


class MetricSnapshot(BaseModel):
    """Immutable set of all records the engine analyzes."""
    model_config = ConfigDict(frozen=True)

    outcomes: Tuple[OutcomeRecord, ...] = ()
    licensing_exams: Tuple[LicensingExamRecord, ...] = ()
    courses: Tuple[CourseQualityRecord, ...] = ()
    trends: Tuple[TrendRecord, ...] = ()

    def replace(self, category: Category, records) -> "MetricSnapshot":
        """Return a new snapshot with one category swapped out."""
        field_name = CATEGORY_FIELDS[Category(category)]
        return self.model_copy(update={field_name: tuple(records)})

    def records(self, category: Category) -> tuple:
        return getattr(self, CATEGORY_FIELDS[Category(category)])


CATEGORY_FIELDS = {
    Category.OUTCOME: "outcomes",
    Category.LICENSING_EXAM: "licensing_exams",
    Category.COURSE_QUALITY: "courses",
    Category.TREND: "trends",
}

CATEGORY_MODELS = {
    Category.OUTCOME: OutcomeRecord,
    Category.LICENSING_EXAM: LicensingExamRecord,
    Category.COURSE_QUALITY: CourseQualityRecord,
    Category.TREND: TrendRecord,
}


SEVERITY_RANKS = {
    Severity.CRITICAL: 0,
    Severity.NEEDS_IMPROVEMENT: 1,
    Severity.QUALITY_ISSUE: 2,
    Severity.DECLINING_TREND: 2,
}


class Finding(BaseModel):
    """A flagged area of the curriculum."""
    model_config = ConfigDict(frozen=True)

    level: Severity
    area: str
    detail: str
    instrument_failure: bool = False

    @property
    def rank(self) -> int:
        """Sort rank; instrument failures weigh the same as critical findings."""
        if self.instrument_failure:
            return 0
        return SEVERITY_RANKS[self.level]


class ActionItem(BaseModel):
    """An improvement action derived from findings."""
    model_config = ConfigDict(frozen=True)

    priority: Priority
    description: str
    area: str = ""


class AnalysisResult(BaseModel):
    """Output of the outcome analysis engine."""
    model_config = ConfigDict(frozen=True)

    findings: Tuple[Finding, ...] = ()
    actions: Tuple[ActionItem, ...] = ()
    overall_score: float
    status: OverallStatus

    def count(self, level: Severity) -> int:
        return sum(1 for f in self.findings if f.level == level)


class AuditEntry(BaseModel):
    """One row of the audit log."""
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    actor: str = ""
    action: str
    details: str = ""


class UserProfile(BaseModel):
    """Public user profile returned on login."""
    id: str
    email: str
    name: str
    role: Role = Role.FACULTY
    avatar: str = ""


class UserAccount(UserProfile):
    """Stored user account."""
    password_hash: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    last_login: Optional[datetime] = None
    reset_code_hash: Optional[str] = None
    reset_expires_at: Optional[datetime] = None

    def profile(self) -> UserProfile:
        return UserProfile(
            id=self.id, email=self.email, name=self.name,
            role=self.role, avatar=self.avatar
        )


class Session(BaseModel):
    """Issued login session."""
    token: str
    profile: UserProfile


class MonitorReport(BaseModel):
    """Analysis result together with the snapshot it was computed from."""
    snapshot: Optional[MetricSnapshot] = None
    result: Optional[AnalysisResult] = None
    offline: bool = False
    errors: List[str] = Field(default_factory=list)
    warnings: List[str] = Field(default_factory=list)
    execution_time: float = 0.0

    @property
    def status(self) -> str:
        return "failed" if self.result is None else "completed"
