"""Overall outcome scoring."""

from typing import Sequence, Tuple

from ..exceptions import ComputationError
from ..models.data_models import OutcomeRecord, OverallStatus
from .metrics import MetricsCalculator

# Lower edge of each band, highest first.
STATUS_BREAKPOINTS = (
    (90.0, OverallStatus.EXCELLENT),
    (80.0, OverallStatus.GOOD),
    (70.0, OverallStatus.NEEDS_IMPROVEMENT),
)


class OutcomeScorer:
    """Score a program from its outcome records."""

    def __init__(self, calculator: MetricsCalculator = None):
        self.calculator = calculator or MetricsCalculator()

    def overall_score(self, records: Sequence[OutcomeRecord]) -> float:
        """Mean of the per-record six-year averages."""
        if not records:
            raise ComputationError("Outcome records are required to score the program")
        averages = self.calculator.outcome_averages(records)
        return sum(averages) / len(averages)

    def status_for(self, score: float) -> OverallStatus:
        for lower, status in STATUS_BREAKPOINTS:
            if score >= lower:
                return status
        return OverallStatus.CRITICAL

    def score(self, records: Sequence[OutcomeRecord]) -> Tuple[float, OverallStatus]:
        """Score records.

        Returns:
            Tuple of (overall_score, status)
        """
        overall = self.overall_score(records)
        return overall, self.status_for(overall)
