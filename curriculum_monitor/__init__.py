"""
Curriculum Monitor

Curriculum-quality analysis for medical programs: outcome achievement,
licensing exams, course psychometrics and multi-year trends.
"""

__version__ = "0.1.0"
__author__ = "Curriculum Quality Team"

from .analysis.engine import OutcomeAnalysisEngine, evaluate
from .models.data_models import AnalysisResult, MetricSnapshot
from .orchestrator.main import CurriculumMonitorOrchestrator

__all__ = [
    "OutcomeAnalysisEngine",
    "evaluate",
    "AnalysisResult",
    "MetricSnapshot",
    "CurriculumMonitorOrchestrator",
]
