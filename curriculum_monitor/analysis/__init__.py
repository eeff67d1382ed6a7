"""Analysis engine components."""

from .metrics import MetricsCalculator
from .rules import DEFAULT_RULES, Rule, TrendRule
from .rule_evaluator import RuleEvaluator
from .scoring import OutcomeScorer
from .prioritizer import FindingPrioritizer
from .engine import OutcomeAnalysisEngine, evaluate

__all__ = [
    "MetricsCalculator",
    "DEFAULT_RULES",
    "Rule",
    "TrendRule",
    "RuleEvaluator",
    "OutcomeScorer",
    "FindingPrioritizer",
    "OutcomeAnalysisEngine",
    "evaluate",
]
