"""Rule evaluation over a metric snapshot."""

from typing import List, Optional, Sequence, Tuple

from ..models.data_models import ActionItem, Category, Finding, MetricSnapshot
from ..utils.logging import get_logger
from .rules import DEFAULT_RULES, Rule, TrendRule, rules_for

EVALUATION_ORDER = (
    Category.OUTCOME,
    Category.LICENSING_EXAM,
    Category.COURSE_QUALITY,
)


class RuleEvaluator:
    """Apply per-record rules and the trend rule to a snapshot."""

    def __init__(
        self,
        rules: Sequence[Rule] = DEFAULT_RULES,
        trend_rule: Optional[TrendRule] = None
    ):
        """Initialize rule evaluator.

        Args:
            rules: Per-record rules in evaluation order
            trend_rule: Cross-record trend rule
        """
        self.rules = tuple(rules)
        self.trend_rule = trend_rule or TrendRule()
        self.logger = get_logger("rule_evaluator")

    def evaluate(self, snapshot: MetricSnapshot) -> Tuple[List[Finding], List[ActionItem]]:
        """Evaluate all rules.

        Findings and actions come out in rule-evaluation order: outcome
        records, then licensing exams, then courses, then the trend rule.

        Args:
            snapshot: Snapshot to evaluate

        Returns:
            Tuple of (findings, actions)

        Raises:
            ComputationError: If a required field is non-numeric or missing
        """
        findings: List[Finding] = []
        actions: List[ActionItem] = []

        for category in EVALUATION_ORDER:
            category_rules = rules_for(category, self.rules)
            for record in snapshot.records(category):
                for rule in category_rules:
                    finding, action = rule.evaluate(record)
                    if finding is None:
                        continue
                    self.logger.debug(f"Rule {rule.name} fired for {finding.area}")
                    findings.append(finding)
                    if action is not None:
                        actions.append(action)

        trend_findings, trend_actions = self.trend_rule.evaluate(snapshot.trends)
        if trend_findings:
            self.logger.debug(f"Rule {self.trend_rule.name} fired")
        findings.extend(trend_findings)
        actions.extend(trend_actions)

        return findings, actions
