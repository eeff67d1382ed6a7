"""Sample dataset for a fresh data directory."""

import random
from typing import Any, Dict, List, Optional

from ..models.data_models import Category

OUTCOME_NAMES = [
    "Ethics and professionalism",
    "Medical knowledge",
    "Analytical skills",
    "Communication",
    "Teamwork",
    "Lifelong learning",
    "Community practice",
]

EXAM_NAMES = ["NL1 (year 3)", "NL2 (year 5)", "NL3 (year 6)"]


def generate_sample_tables(seed: Optional[int] = None) -> Dict[Category, List[Dict[str, Any]]]:
    """Generate sample rows for every category.

    Args:
        seed: Random seed for a reproducible dataset

    Returns:
        Rows keyed by stored column name, per category
    """
    rng = random.Random(seed)

    def rand(low: float, high: float) -> int:
        return round(low + rng.random() * (high - low))

    def rand_dec(low: float, high: float) -> float:
        return round(low + rng.random() * (high - low), 1)

    outcomes = [
        {
            "plo_id": f"PLO {i + 1}", "plo_name": name,
            "y1": rand(75, 95), "y2": rand(78, 96), "y3": rand(80, 97),
            "y4": rand(82, 98), "y5": rand(84, 99), "y6": rand(86, 99),
            "employer": rand_dec(3.5, 4.8), "graduate": rand_dec(3.6, 4.9),
        }
        for i, name in enumerate(OUTCOME_NAMES)
    ]

    exam_ranges = [((85, 96), (60, 72), (80, 88)), ((88, 98), (62, 75), (82, 90)),
                   ((90, 99), (65, 78), (84, 92))]
    exams = [
        {
            "exam_name": name, "pass_rate": rand(*passing),
            "mean_score": rand(*mean), "national_avg": rand(*national),
        }
        for name, (passing, mean, national) in zip(EXAM_NAMES, exam_ranges)
    ]

    courses = [
        {
            "course_name": f"Course {i + 1}", "clo_achieve": rand(75, 98),
            "reliability": round(0.65 + rng.random() * 0.30, 2),
            "difficulty": round(0.30 + rng.random() * 0.40, 2),
            "discrimination": round(0.15 + rng.random() * 0.30, 2),
            "pass_rate": rand(78, 99),
        }
        for i in range(8)
    ]

    trends = [
        {
            "year": str(2564 + i), "graduation": rand(90, 98), "nl_pass": rand(85, 97),
            "employer_score": rand_dec(3.5, 4.7), "retention": rand(78, 95),
        }
        for i in range(5)
    ]

    return {
        Category.OUTCOME: outcomes,
        Category.LICENSING_EXAM: exams,
        Category.COURSE_QUALITY: courses,
        Category.TREND: trends,
    }
