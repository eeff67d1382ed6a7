"""Outcome analysis engine."""

from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from ..exceptions import ComputationError
from ..models.data_models import STRICT_NUMBERS, AnalysisResult, MetricSnapshot
from ..utils.logging import get_logger
from .prioritizer import FindingPrioritizer
from .rule_evaluator import RuleEvaluator
from .scoring import OutcomeScorer


class OutcomeAnalysisEngine:
    """Turn a metric snapshot into findings, actions and a status.

    The engine holds no state between calls. Evaluating value-equal snapshots
    yields equal results, and callers may share one engine across threads.
    """

    def __init__(
        self,
        evaluator: Optional[RuleEvaluator] = None,
        scorer: Optional[OutcomeScorer] = None,
        prioritizer: Optional[FindingPrioritizer] = None
    ):
        self.evaluator = evaluator or RuleEvaluator()
        self.scorer = scorer or OutcomeScorer()
        self.prioritizer = prioritizer or FindingPrioritizer()
        self.logger = get_logger("engine")

    def evaluate(self, snapshot: Union[MetricSnapshot, Mapping[str, Any]]) -> AnalysisResult:
        """Analyze a snapshot.

        Args:
            snapshot: Snapshot, or a mapping of snapshot fields; numeric
                fields of a mapping must be int or float values

        Returns:
            Analysis result

        Raises:
            ComputationError: If snapshot data is non-numeric or incomplete
        """
        snapshot = self._coerce(snapshot)

        findings, actions = self.evaluator.evaluate(snapshot)
        overall_score, status = self.scorer.score(snapshot.outcomes)
        ordered = self.prioritizer.prioritize(findings)

        self.logger.info(
            f"Analysis produced {len(ordered)} findings and {len(actions)} actions "
            f"(score {overall_score:.1f}, {status.value})"
        )

        return AnalysisResult(
            findings=tuple(ordered),
            actions=tuple(actions),
            overall_score=overall_score,
            status=status,
        )

    def _coerce(self, snapshot) -> MetricSnapshot:
        if isinstance(snapshot, MetricSnapshot):
            return snapshot
        if not isinstance(snapshot, Mapping):
            raise ComputationError(
                f"Expected a MetricSnapshot, got {type(snapshot).__name__}"
            )
        try:
            return MetricSnapshot.model_validate(snapshot, context={STRICT_NUMBERS: True})
        except PydanticValidationError as e:
            raise ComputationError(f"Malformed snapshot: {e}") from e


def evaluate(snapshot: Union[MetricSnapshot, Mapping[str, Any]]) -> AnalysisResult:
    """Analyze a snapshot with the default rule set."""
    return OutcomeAnalysisEngine().evaluate(snapshot)
