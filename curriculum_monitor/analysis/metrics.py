"""Metric calculations shared by rules and scoring."""

import math
from numbers import Real
from typing import Any, List

from ..exceptions import ComputationError
from ..models.data_models import OutcomeRecord


def require_number(record: Any, field: str) -> float:
    """Read a numeric field, failing instead of coercing.

    Raises:
        ComputationError: If the field is missing, non-numeric or not finite
    """
    value = getattr(record, field, None)
    if value is None:
        raise ComputationError(f"{type(record).__name__}.{field} is missing")
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ComputationError(
            f"{type(record).__name__}.{field} is not numeric: {value!r}"
        )
    value = float(value)
    if not math.isfinite(value):
        raise ComputationError(f"{type(record).__name__}.{field} is not finite")
    return value


def format_number(value: float) -> str:
    """Render a value without a trailing '.0' for whole numbers."""
    if float(value).is_integer():
        return str(int(value))
    return str(value)


class MetricsCalculator:
    """Calculate outcome metrics."""

    YEAR_FIELDS = ("y1", "y2", "y3", "y4", "y5", "y6")

    def yearly_values(self, record: OutcomeRecord) -> List[float]:
        """Return the six yearly achievement values of a record."""
        return [require_number(record, name) for name in self.YEAR_FIELDS]

    def outcome_average(self, record: OutcomeRecord) -> float:
        """Arithmetic mean of the six yearly achievement values."""
        values = self.yearly_values(record)
        return sum(values) / len(values)

    def outcome_averages(self, records) -> List[float]:
        return [self.outcome_average(r) for r in records]
