"""Finding prioritization."""

from typing import Iterable, List

from ..models.data_models import Finding


class FindingPrioritizer:
    """Order findings by severity rank."""

    def prioritize(self, findings: Iterable[Finding]) -> List[Finding]:
        """Stable sort by rank; equal ranks keep rule-evaluation order."""
        return sorted(findings, key=lambda f: f.rank)
