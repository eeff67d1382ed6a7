"""Test analysis engine components."""

import math
import pytest

from curriculum_monitor.analysis.engine import OutcomeAnalysisEngine, evaluate
from curriculum_monitor.analysis.metrics import MetricsCalculator, format_number, require_number
from curriculum_monitor.analysis.prioritizer import FindingPrioritizer
from curriculum_monitor.analysis.rule_evaluator import RuleEvaluator
from curriculum_monitor.analysis.rules import (
    COURSE_LOW_DISCRIMINATION, COURSE_LOW_RELIABILITY, DEFAULT_RULES,
    EXAM_BELOW_MINIMUM, EXAM_BELOW_NATIONAL, OUTCOME_BELOW_TARGET,
    OUTCOME_CLINICAL_DECLINE, OUTCOME_CRITICAL, OUTCOME_EMPLOYER_RATING,
    TrendRule, rules_for
)
from curriculum_monitor.analysis.scoring import OutcomeScorer
from curriculum_monitor.exceptions import ComputationError
from curriculum_monitor.models.data_models import (
    Category, Finding, MetricSnapshot, OutcomeRecord, OverallStatus,
    Priority, Severity
)

from conftest import make_course, make_exam, make_outcome, make_trend


class TestMetricsCalculator:
    """Test metrics calculator."""

    def test_outcome_average(self):
        """Test six-year mean."""
        calculator = MetricsCalculator()
        record = make_outcome(years=(70, 75, 80, 85, 90, 95))

        assert calculator.outcome_average(record) == 82.5

    def test_require_number_rejects_text(self):
        """Test non-numeric fields fail instead of coercing."""
        record = OutcomeRecord.model_construct(id="PLO 1", label="x", y1="abc")

        with pytest.raises(ComputationError, match="y1"):
            require_number(record, "y1")

    def test_require_number_rejects_missing_and_nan(self):
        """Test missing and non-finite fields fail."""
        record = OutcomeRecord.model_construct(id="PLO 1", label="x", y1=math.nan)

        with pytest.raises(ComputationError, match="not finite"):
            require_number(record, "y1")
        with pytest.raises(ComputationError, match="missing"):
            require_number(record, "y2")

    def test_require_number_rejects_bool(self):
        record = OutcomeRecord.model_construct(id="PLO 1", label="x", y1=True)

        with pytest.raises(ComputationError):
            require_number(record, "y1")

    def test_format_number(self):
        assert format_number(70.0) == "70"
        assert format_number(3.0) == "3"
        assert format_number(0.65) == "0.65"
        assert format_number(85.5) == "85.5"


class TestOutcomeRules:
    """Test per-outcome rules in isolation."""

    def test_critical_average(self):
        """Test average below 70 fires critical with an urgent action."""
        record = make_outcome(label="Ethics", years=(60, 60, 60, 60, 60, 60))

        finding, action = OUTCOME_CRITICAL.evaluate(record)

        assert finding.level == Severity.CRITICAL
        assert finding.area == "PLO 1"
        assert finding.detail == "Ethics: aggregate 60.0% far below threshold"
        assert action.priority == Priority.URGENT
        assert action.description == (
            "review all courses supporting PLO 1; prepare an urgent improvement plan"
        )

    def test_below_target_average(self):
        """Test average in [70, 80) fires needs-improvement."""
        record = make_outcome(label="Ethics", years=(75, 75, 75, 75, 75, 75))

        assert OUTCOME_CRITICAL.evaluate(record) == (None, None)
        finding, action = OUTCOME_BELOW_TARGET.evaluate(record)

        assert finding.level == Severity.NEEDS_IMPROVEMENT
        assert finding.detail == "Ethics: aggregate 75.0% below the 80% target"
        assert action.priority == Priority.IMPORTANT
        assert action.description == "perform root-cause analysis for PLO 1"

    def test_average_bands_are_exclusive(self):
        """Test exactly 70 is below target, not critical; exactly 80 fires neither."""
        at_70 = make_outcome(years=(70, 70, 70, 70, 70, 70))
        at_80 = make_outcome(years=(80, 80, 80, 80, 80, 80))

        assert OUTCOME_CRITICAL.evaluate(at_70) == (None, None)
        assert OUTCOME_BELOW_TARGET.evaluate(at_70)[0] is not None
        assert OUTCOME_CRITICAL.evaluate(at_80) == (None, None)
        assert OUTCOME_BELOW_TARGET.evaluate(at_80) == (None, None)

    def test_clinical_year_decline(self):
        """Test year 6 below year 4 fires a declining trend."""
        record = make_outcome(label="Teamwork", years=(90, 90, 80, 90, 90, 70))

        finding, action = OUTCOME_CLINICAL_DECLINE.evaluate(record)

        assert finding.level == Severity.DECLINING_TREND
        assert finding.detail == "Teamwork: clinical-year (70%) below year-4 (90%) achievement"
        assert action is None

    def test_equal_years_do_not_decline(self):
        record = make_outcome(years=(80, 80, 80, 85, 80, 85))

        assert OUTCOME_CLINICAL_DECLINE.evaluate(record) == (None, None)

    def test_employer_rating(self):
        """Test employer score below 3.5 fires."""
        record = make_outcome(label="Ethics", employer=3.4)

        finding, action = OUTCOME_EMPLOYER_RATING.evaluate(record)

        assert finding.level == Severity.NEEDS_IMPROVEMENT
        assert finding.detail == "employer rating for Ethics is 3.4/5.0"
        assert action is None
        assert OUTCOME_EMPLOYER_RATING.evaluate(make_outcome(employer=3.5)) == (None, None)


class TestExamRules:
    """Test licensing exam rules."""

    def test_below_national_average(self):
        finding, _ = EXAM_BELOW_NATIONAL.evaluate(make_exam(pass_rate=84, national_average=86))

        assert finding.level == Severity.NEEDS_IMPROVEMENT
        assert finding.area == "NL1 (year 3)"
        assert finding.detail == "pass rate 84% below national average 86%"

    def test_below_minimum(self):
        finding, _ = EXAM_BELOW_MINIMUM.evaluate(make_exam(pass_rate=79.5, national_average=70))

        assert finding.level == Severity.CRITICAL
        assert finding.detail == "pass rate 79.5% below minimum threshold"

    def test_minimum_boundary(self):
        assert EXAM_BELOW_MINIMUM.evaluate(make_exam(pass_rate=80)) == (None, None)


class TestCourseRules:
    """Test course quality rules."""

    def test_low_reliability(self):
        finding, action = COURSE_LOW_RELIABILITY.evaluate(make_course("Anatomy", reliability=0.65))

        assert finding.level == Severity.QUALITY_ISSUE
        assert finding.detail == "reliability (α=0.65) below 0.70"
        assert finding.rank == 2
        assert action.priority == Priority.IMPORTANT
        assert action.description == "revise the assessment instrument for Anatomy"

    def test_low_discrimination_ranks_with_critical(self):
        finding, action = COURSE_LOW_DISCRIMINATION.evaluate(make_course(discrimination=0.15))

        assert finding.level == Severity.QUALITY_ISSUE
        assert finding.instrument_failure is True
        assert finding.rank == 0
        assert finding.detail == (
            "discrimination index (0.15) too low — instrument fails to differentiate learners"
        )
        assert action is None

    def test_thresholds_are_strict(self):
        record = make_course(reliability=0.70, discrimination=0.20)

        assert COURSE_LOW_RELIABILITY.evaluate(record) == (None, None)
        assert COURSE_LOW_DISCRIMINATION.evaluate(record) == (None, None)


class TestTrendRule:
    """Test cross-record trend rule."""

    def _pass_rates(self, *rates):
        return [make_trend(str(2560 + i), rate) for i, rate in enumerate(rates)]

    def test_requires_three_years(self):
        assert TrendRule().evaluate(self._pass_rates(95, 80)) == ([], [])

    def test_strict_decline_fires(self):
        findings, actions = TrendRule().evaluate(self._pass_rates(90, 85, 80))

        assert len(findings) == 1
        assert findings[0].level == Severity.DECLINING_TREND
        assert findings[0].detail == "licensing pass rate declining across recent years"
        assert actions[0].priority == Priority.URGENT
        assert actions[0].description == (
            "review curriculum and licensing-exam preparation system urgently"
        )

    def test_both_later_years_below_oldest_fires(self):
        """Test a rebound in the newest year still fires."""
        findings, _ = TrendRule().evaluate(self._pass_rates(90, 80, 85))

        assert len(findings) == 1

    def test_middle_year_above_oldest_does_not_fire(self):
        assert TrendRule().evaluate(self._pass_rates(90, 92, 85)) == ([], [])

    def test_uses_most_recent_three_years(self):
        assert len(TrendRule().evaluate(self._pass_rates(50, 60, 90, 85, 80))[0]) == 1
        assert TrendRule().evaluate(self._pass_rates(95, 90, 80, 85, 88)) == ([], [])


class TestRuleRegistry:
    """Test rule registry."""

    def test_rules_for_category_keep_order(self):
        assert rules_for(Category.OUTCOME) == [
            OUTCOME_CRITICAL, OUTCOME_BELOW_TARGET, OUTCOME_CLINICAL_DECLINE, OUTCOME_EMPLOYER_RATING
        ]
        assert rules_for(Category.TREND) == []

    def test_every_rule_has_unique_name(self):
        names = [rule.name for rule in DEFAULT_RULES]
        assert len(names) == len(set(names))


class TestRuleEvaluator:
    """Test rule evaluator."""

    def test_evaluation_order(self, troubled_snapshot):
        """Test findings follow outcome, exam, course, trend order."""
        findings, actions = RuleEvaluator().evaluate(troubled_snapshot)

        assert [f.area for f in findings] == [
            "PLO 1", "PLO 1", "PLO 2",
            "NL2 (year 5)", "NL2 (year 5)",
            "Course 3", "Course 3",
            "licensing pass rate",
        ]
        assert [a.priority for a in actions] == [Priority.URGENT, Priority.IMPORTANT, Priority.URGENT]

    def test_healthy_snapshot_has_no_findings(self, healthy_snapshot):
        assert RuleEvaluator().evaluate(healthy_snapshot) == ([], [])

    def test_custom_rule_set(self, troubled_snapshot):
        """Test evaluator with a reduced rule set."""
        evaluator = RuleEvaluator(rules=[EXAM_BELOW_MINIMUM])
        findings, actions = evaluator.evaluate(troubled_snapshot)

        assert [f.level for f in findings] == [Severity.CRITICAL, Severity.DECLINING_TREND]
        assert len(actions) == 1


class TestOutcomeScorer:
    """Test overall scoring."""

    @pytest.mark.parametrize("score,status", [
        (100.0, OverallStatus.EXCELLENT),
        (90.0, OverallStatus.EXCELLENT),
        (89.999, OverallStatus.GOOD),
        (80.0, OverallStatus.GOOD),
        (79.999, OverallStatus.NEEDS_IMPROVEMENT),
        (70.0, OverallStatus.NEEDS_IMPROVEMENT),
        (69.999, OverallStatus.CRITICAL),
        (0.0, OverallStatus.CRITICAL),
    ])
    def test_status_breakpoints(self, score, status):
        assert OutcomeScorer().status_for(score) == status

    def test_mean_of_averages(self):
        """Test averages of 70, 80 and 90 give exactly 80 and Good."""
        records = [
            make_outcome("PLO 1", years=(70, 70, 70, 70, 70, 70)),
            make_outcome("PLO 2", years=(75, 85, 75, 85, 75, 85)),
            make_outcome("PLO 3", years=(90, 90, 90, 90, 90, 90)),
        ]

        overall, status = OutcomeScorer().score(records)

        assert overall == 80.0
        assert status == OverallStatus.GOOD

    def test_no_outcomes(self):
        with pytest.raises(ComputationError, match="Outcome records are required"):
            OutcomeScorer().score([])


class TestFindingPrioritizer:
    """Test finding prioritization."""

    def test_stable_sort(self):
        findings = [
            Finding(level=Severity.DECLINING_TREND, area="a", detail="1"),
            Finding(level=Severity.NEEDS_IMPROVEMENT, area="b", detail="2"),
            Finding(level=Severity.QUALITY_ISSUE, area="c", detail="3", instrument_failure=True),
            Finding(level=Severity.QUALITY_ISSUE, area="d", detail="4"),
            Finding(level=Severity.CRITICAL, area="e", detail="5"),
            Finding(level=Severity.NEEDS_IMPROVEMENT, area="f", detail="6"),
        ]

        ordered = FindingPrioritizer().prioritize(findings)

        assert [f.detail for f in ordered] == ["3", "5", "2", "6", "1", "4"]


class TestOutcomeAnalysisEngine:
    """Test the full engine."""

    def test_critical_outcome_scenario(self):
        """Test a uniformly 60% outcome with a weak employer rating."""
        snapshot = MetricSnapshot(outcomes=[
            make_outcome(label="Ethics", years=(60, 60, 60, 60, 60, 60), employer=3.0)
        ])

        result = evaluate(snapshot)

        assert [f.level for f in result.findings] == [Severity.CRITICAL, Severity.NEEDS_IMPROVEMENT]
        assert result.findings[1].detail == "employer rating for Ethics is 3/5.0"
        assert len(result.actions) == 1
        assert result.actions[0].priority == Priority.URGENT
        assert "PLO 1" in result.actions[0].description
        assert result.status == OverallStatus.CRITICAL

    def test_clinical_decline_scenario(self):
        """Test an 85% average with year 6 below year 4."""
        snapshot = MetricSnapshot(outcomes=[make_outcome(years=(90, 90, 80, 90, 90, 70))])

        result = evaluate(snapshot)

        assert [f.level for f in result.findings] == [Severity.DECLINING_TREND]
        assert result.actions == ()
        assert result.overall_score == 85.0

    def test_exam_scenario(self):
        """Test one exam record producing two findings."""
        snapshot = MetricSnapshot(
            outcomes=[make_outcome()],
            licensing_exams=[make_exam(pass_rate=75, national_average=80)],
        )

        result = evaluate(snapshot)

        assert [f.level for f in result.findings] == [Severity.CRITICAL, Severity.NEEDS_IMPROVEMENT]
        assert result.actions == ()

    def test_course_scenario(self):
        """Test one course record producing two quality issues and one action."""
        snapshot = MetricSnapshot(
            outcomes=[make_outcome()],
            courses=[make_course(reliability=0.65, discrimination=0.15)],
        )

        result = evaluate(snapshot)

        assert [f.level for f in result.findings] == [Severity.QUALITY_ISSUE, Severity.QUALITY_ISSUE]
        assert result.findings[0].instrument_failure is True
        assert [a.priority for a in result.actions] == [Priority.IMPORTANT]

    def test_full_ordering(self, troubled_snapshot):
        """Test ranking across all record kinds."""
        result = OutcomeAnalysisEngine().evaluate(troubled_snapshot)

        assert [(f.area, f.level) for f in result.findings] == [
            ("PLO 1", Severity.CRITICAL),
            ("NL2 (year 5)", Severity.CRITICAL),
            ("Course 3", Severity.QUALITY_ISSUE),
            ("PLO 1", Severity.NEEDS_IMPROVEMENT),
            ("NL2 (year 5)", Severity.NEEDS_IMPROVEMENT),
            ("PLO 2", Severity.DECLINING_TREND),
            ("Course 3", Severity.QUALITY_ISSUE),
            ("licensing pass rate", Severity.DECLINING_TREND),
        ]
        assert result.overall_score == 72.5
        assert result.status == OverallStatus.NEEDS_IMPROVEMENT

    def test_ranks_are_partitioned(self, troubled_snapshot):
        ranks = [f.rank for f in evaluate(troubled_snapshot).findings]
        assert ranks == sorted(ranks)

    def test_idempotent(self, troubled_snapshot):
        """Test value-equal snapshots produce equal results."""
        engine = OutcomeAnalysisEngine()
        copy = MetricSnapshot.model_validate(troubled_snapshot.model_dump())

        assert copy is not troubled_snapshot
        assert engine.evaluate(troubled_snapshot) == engine.evaluate(copy)
        assert engine.evaluate(troubled_snapshot) == engine.evaluate(troubled_snapshot)

    def test_snapshot_unchanged(self, troubled_snapshot):
        before = troubled_snapshot.model_dump()
        evaluate(troubled_snapshot)
        assert troubled_snapshot.model_dump() == before

    def test_healthy_snapshot(self, healthy_snapshot):
        result = evaluate(healthy_snapshot)

        assert result.findings == ()
        assert result.actions == ()
        assert result.status == OverallStatus.GOOD

    def test_mapping_input(self):
        """Test a plain mapping is validated into a snapshot."""
        result = evaluate({"outcomes": [make_outcome().model_dump()]})
        assert result.overall_score == 85.0

    def test_malformed_mapping_raises(self):
        data = make_outcome().model_dump()
        data["y3"] = "abc"

        with pytest.raises(ComputationError):
            evaluate({"outcomes": [data]})

    @pytest.mark.parametrize("field,value", [
        ("y1", True),
        ("y4", False),
        ("employer", "3.0"),
        ("graduate", "4"),
    ])
    def test_mapping_values_are_not_coerced(self, field, value):
        """Test bools and numeric text in a mapping fail instead of converting."""
        data = make_outcome().model_dump()
        data[field] = value

        with pytest.raises(ComputationError, match=field):
            evaluate({"outcomes": [data]})

    def test_mapping_accepts_int_values(self):
        data = make_outcome().model_dump()
        data.update(y1=85, employer=4)

        assert evaluate({"outcomes": [data]}).overall_score == 85.0

    def test_mapping_values_checked_in_every_category(self):
        exam = make_exam().model_dump()
        exam["pass_rate"] = "90"

        with pytest.raises(ComputationError, match="pass_rate"):
            evaluate({"outcomes": [make_outcome().model_dump()], "licensing_exams": [exam]})

    def test_unvalidated_record_raises(self):
        """Test non-numeric values that bypassed validation still fail."""
        fields = make_outcome().model_dump()
        fields["employer"] = "n/a"
        record = OutcomeRecord.model_construct(**fields)
        snapshot = MetricSnapshot.model_construct(
            outcomes=(record,), licensing_exams=(), courses=(), trends=()
        )

        with pytest.raises(ComputationError, match="employer"):
            evaluate(snapshot)

    def test_incomplete_record_raises(self):
        record = OutcomeRecord.model_construct(id="PLO 1", label="x", y1=80, y2=80, y3=80)
        snapshot = MetricSnapshot.model_construct(
            outcomes=(record,), licensing_exams=(), courses=(), trends=()
        )

        with pytest.raises(ComputationError, match="missing"):
            evaluate(snapshot)

    def test_wrong_input_type(self):
        with pytest.raises(ComputationError):
            evaluate([1, 2, 3])

    def test_no_outcomes_raises(self):
        with pytest.raises(ComputationError):
            evaluate(MetricSnapshot(licensing_exams=[make_exam()]))
