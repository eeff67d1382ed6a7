"""Rule registry for curriculum outcome analysis.

Each rule inspects one record of a single category. Rules are independent of
each other: several rules may fire for the same record, and their findings are
kept side by side. Order in ``DEFAULT_RULES`` is evaluation order within a
category.
"""

from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Sequence, Tuple

from ..models.data_models import (
    ActionItem, Category, Finding, Priority, Severity, TrendRecord
)
from .metrics import MetricsCalculator, format_number, require_number

CRITICAL_AVERAGE = 70.0
TARGET_AVERAGE = 80.0
MIN_EMPLOYER_SCORE = 3.5
MIN_EXAM_PASS_RATE = 80.0
MIN_RELIABILITY = 0.70
MIN_DISCRIMINATION = 0.20
TREND_WINDOW = 3

_calculator = MetricsCalculator()


@dataclass(frozen=True)
class Rule:
    """A declarative per-record rule."""
    name: str
    applies_to: Category
    predicate: Callable[[Any], bool]
    finding_factory: Callable[[Any], Finding]
    action_factory: Optional[Callable[[Any], ActionItem]] = None

    def evaluate(self, record: Any) -> Tuple[Optional[Finding], Optional[ActionItem]]:
        """Apply the rule to one record.

        Returns:
            Tuple of (finding, action); both None when the rule does not fire
        """
        if not self.predicate(record):
            return None, None
        finding = self.finding_factory(record)
        action = self.action_factory(record) if self.action_factory else None
        return finding, action


# Outcome rules

def _average(record) -> float:
    return _calculator.outcome_average(record)


OUTCOME_CRITICAL = Rule(
    name="outcome_average_critical",
    applies_to=Category.OUTCOME,
    predicate=lambda r: _average(r) < CRITICAL_AVERAGE,
    finding_factory=lambda r: Finding(
        level=Severity.CRITICAL,
        area=r.id,
        detail=f"{r.label}: aggregate {_average(r):.1f}% far below threshold",
    ),
    action_factory=lambda r: ActionItem(
        priority=Priority.URGENT,
        area=r.id,
        description=f"review all courses supporting {r.id}; prepare an urgent improvement plan",
    ),
)

OUTCOME_BELOW_TARGET = Rule(
    name="outcome_average_below_target",
    applies_to=Category.OUTCOME,
    predicate=lambda r: CRITICAL_AVERAGE <= _average(r) < TARGET_AVERAGE,
    finding_factory=lambda r: Finding(
        level=Severity.NEEDS_IMPROVEMENT,
        area=r.id,
        detail=f"{r.label}: aggregate {_average(r):.1f}% below the 80% target",
    ),
    action_factory=lambda r: ActionItem(
        priority=Priority.IMPORTANT,
        area=r.id,
        description=f"perform root-cause analysis for {r.id}",
    ),
)

OUTCOME_CLINICAL_DECLINE = Rule(
    name="outcome_clinical_year_decline",
    applies_to=Category.OUTCOME,
    predicate=lambda r: require_number(r, "y6") < require_number(r, "y4"),
    finding_factory=lambda r: Finding(
        level=Severity.DECLINING_TREND,
        area=r.id,
        detail=(
            f"{r.label}: clinical-year ({format_number(r.y6)}%) below "
            f"year-4 ({format_number(r.y4)}%) achievement"
        ),
    ),
)

OUTCOME_EMPLOYER_RATING = Rule(
    name="outcome_employer_rating",
    applies_to=Category.OUTCOME,
    predicate=lambda r: require_number(r, "employer") < MIN_EMPLOYER_SCORE,
    finding_factory=lambda r: Finding(
        level=Severity.NEEDS_IMPROVEMENT,
        area=r.id,
        detail=f"employer rating for {r.label} is {format_number(r.employer)}/5.0",
    ),
)

# Licensing exam rules

EXAM_BELOW_NATIONAL = Rule(
    name="exam_below_national_average",
    applies_to=Category.LICENSING_EXAM,
    predicate=lambda r: require_number(r, "pass_rate") < require_number(r, "national_average"),
    finding_factory=lambda r: Finding(
        level=Severity.NEEDS_IMPROVEMENT,
        area=r.label,
        detail=(
            f"pass rate {format_number(r.pass_rate)}% below national average "
            f"{format_number(r.national_average)}%"
        ),
    ),
)

EXAM_BELOW_MINIMUM = Rule(
    name="exam_below_minimum",
    applies_to=Category.LICENSING_EXAM,
    predicate=lambda r: require_number(r, "pass_rate") < MIN_EXAM_PASS_RATE,
    finding_factory=lambda r: Finding(
        level=Severity.CRITICAL,
        area=r.label,
        detail=f"pass rate {format_number(r.pass_rate)}% below minimum threshold",
    ),
)

# Course quality rules

COURSE_LOW_RELIABILITY = Rule(
    name="course_low_reliability",
    applies_to=Category.COURSE_QUALITY,
    predicate=lambda r: require_number(r, "reliability") < MIN_RELIABILITY,
    finding_factory=lambda r: Finding(
        level=Severity.QUALITY_ISSUE,
        area=r.label,
        detail=f"reliability (α={format_number(r.reliability)}) below 0.70",
    ),
    action_factory=lambda r: ActionItem(
        priority=Priority.IMPORTANT,
        area=r.label,
        description=f"revise the assessment instrument for {r.label}",
    ),
)

COURSE_LOW_DISCRIMINATION = Rule(
    name="course_low_discrimination",
    applies_to=Category.COURSE_QUALITY,
    predicate=lambda r: require_number(r, "discrimination") < MIN_DISCRIMINATION,
    finding_factory=lambda r: Finding(
        level=Severity.QUALITY_ISSUE,
        area=r.label,
        instrument_failure=True,
        detail=(
            f"discrimination index ({format_number(r.discrimination)}) too low — "
            "instrument fails to differentiate learners"
        ),
    ),
)


DEFAULT_RULES: Tuple[Rule, ...] = (
    OUTCOME_CRITICAL,
    OUTCOME_BELOW_TARGET,
    OUTCOME_CLINICAL_DECLINE,
    OUTCOME_EMPLOYER_RATING,
    EXAM_BELOW_NATIONAL,
    EXAM_BELOW_MINIMUM,
    COURSE_LOW_RELIABILITY,
    COURSE_LOW_DISCRIMINATION,
)


class TrendRule:
    """Cross-record rule over the most recent licensing pass rates.

    Fires when both later years of the last three are below the oldest of the
    three. This is not a strict year-on-year decline: 90, 80, 85 fires.
    """

    name = "licensing_pass_declining"
    window = TREND_WINDOW

    def evaluate(
        self, trends: Sequence[TrendRecord]
    ) -> Tuple[List[Finding], List[ActionItem]]:
        if len(trends) < self.window:
            return [], []

        oldest, middle, newest = trends[-self.window:]
        base = require_number(oldest, "licensing_pass")
        middle_pass = require_number(middle, "licensing_pass")
        newest_pass = require_number(newest, "licensing_pass")

        if newest_pass < base and middle_pass < base:
            finding = Finding(
                level=Severity.DECLINING_TREND,
                area="licensing pass rate",
                detail="licensing pass rate declining across recent years",
            )
            action = ActionItem(
                priority=Priority.URGENT,
                area="licensing pass rate",
                description="review curriculum and licensing-exam preparation system urgently",
            )
            return [finding], [action]

        return [], []


def rules_for(category: Category, rules: Sequence[Rule] = DEFAULT_RULES) -> List[Rule]:
    """Rules applying to a category, in registry order."""
    return [rule for rule in rules if rule.applies_to == category]
