"""Orchestrator module."""

from .main import CurriculumMonitorOrchestrator

__all__ = [
    "CurriculumMonitorOrchestrator",
]
