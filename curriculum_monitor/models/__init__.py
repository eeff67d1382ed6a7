"""Data models."""

from .data_models import (
    ActionItem,
    AnalysisResult,
    AuditEntry,
    Category,
    CourseQualityRecord,
    Finding,
    LicensingExamRecord,
    MetricSnapshot,
    MonitorReport,
    OutcomeRecord,
    OverallStatus,
    Priority,
    Role,
    Session,
    Severity,
    TrendRecord,
    UserAccount,
    UserProfile,
)

__all__ = [
    "ActionItem",
    "AnalysisResult",
    "AuditEntry",
    "Category",
    "CourseQualityRecord",
    "Finding",
    "LicensingExamRecord",
    "MetricSnapshot",
    "MonitorReport",
    "OutcomeRecord",
    "OverallStatus",
    "Priority",
    "Role",
    "Session",
    "Severity",
    "TrendRecord",
    "UserAccount",
    "UserProfile",
]
