"""Orchestrator tying the record store to the analysis engine."""

import json
from datetime import datetime, timezone
from typing import Any, Iterable, List, Optional, Tuple, Union

from ..analysis.engine import OutcomeAnalysisEngine
from ..analysis.metrics import MetricsCalculator
from ..exceptions import CurriculumMonitorError, TransportError
from ..models.data_models import Category, MetricSnapshot, MonitorReport
from ..storage.base import RecordStore
from ..storage.csv_store import CSVRecordStore, read_rows
from ..storage.snapshot import (
    SnapshotCache, records_to_rows, resolve_category, rows_to_records, rows_to_snapshot
)
from ..utils.config import Config
from ..utils.logging import get_logger

DECISION_MATRIX = [
    ("Excellent", ">= 90%", "above target", "maintain level and share good practice"),
    ("Good", "80-89%", "meets target", "minor improvements and monitoring"),
    ("NeedsImprovement", "70-79%", "below target", "root-cause analysis and improvement plan"),
    ("Critical", "< 70%", "not achieved", "urgent plan, report to leadership, revise curriculum"),
]


class CurriculumMonitorOrchestrator:
    """Load snapshots, run the engine and render reports."""

    def __init__(
        self,
        config: Optional[Config] = None,
        store: Optional[RecordStore] = None,
        cache: Optional[SnapshotCache] = None,
        engine: Optional[OutcomeAnalysisEngine] = None
    ):
        """Initialize orchestrator.

        Args:
            config: Configuration instance
            store: Record store; a CSV store in the configured data dir by default
            cache: Last-known-good snapshot cache
            engine: Analysis engine
        """
        self.config = config or Config()
        self.store = store or CSVRecordStore(self.config.data_dir)
        self.cache = cache or SnapshotCache(self.config.snapshot_cache_path)
        self.engine = engine or OutcomeAnalysisEngine()
        self.logger = get_logger("orchestrator")

    async def load_snapshot(self) -> Tuple[MetricSnapshot, bool, List[str]]:
        """Fetch all categories and build a snapshot.

        Falls back to the last-known-good snapshot when the store is
        unreachable.

        Returns:
            Tuple of (snapshot, offline, warnings)

        Raises:
            TransportError: If the store fails and nothing is cached
            ValidationError: If stored rows are malformed
        """
        warnings = []
        try:
            tables = await self.store.fetch_tables()
        except TransportError as e:
            cached = self.cache.load()
            if cached is None:
                raise
            self.logger.warning(f"Store unavailable, using last known good snapshot: {e}")
            warnings.append(f"Offline: store unavailable ({e}); showing last known good data")
            return cached, True, warnings

        snapshot = rows_to_snapshot(tables)
        try:
            self.cache.save(snapshot)
        except TransportError as e:
            self.logger.warning(f"Could not cache snapshot: {e}")
            warnings.append(str(e))
        return snapshot, False, warnings

    async def analyze(self) -> MonitorReport:
        """Load the current snapshot and analyze it.

        Returns:
            Monitor report; failed reports carry errors instead of a result
        """
        start_time = datetime.now(timezone.utc)
        snapshot = None

        try:
            snapshot, offline, warnings = await self.load_snapshot()
            result = self.engine.evaluate(snapshot)
            execution_time = (datetime.now(timezone.utc) - start_time).total_seconds()
            self.logger.info(
                f"Analysis completed in {execution_time:.2f}s: {result.status.value}"
            )
            return MonitorReport(
                snapshot=snapshot,
                result=result,
                offline=offline,
                warnings=warnings,
                execution_time=execution_time,
            )

        except CurriculumMonitorError as e:
            execution_time = (datetime.now(timezone.utc) - start_time).total_seconds()
            self.logger.error(f"Analysis failed: {e}")
            errors = [str(e)] + list(getattr(e, "errors", []))
            return MonitorReport(
                snapshot=snapshot,
                errors=errors,
                execution_time=execution_time,
            )

    async def save_category(
        self,
        category: Union[Category, str],
        records: Iterable[Any],
        actor: str
    ) -> MonitorReport:
        """Validate and replace a category, then recompute the analysis.

        Args:
            category: Category to replace
            records: Records or mappings of record fields
            actor: Identity recorded in the audit log

        Raises:
            ValidationError: If any record is malformed; nothing is written
            NotFoundError: If the category is unknown
        """
        category = resolve_category(category)
        rows = records_to_rows(category, records)
        rows_to_records(category, rows)
        await self.store.replace_all(category, rows, actor)
        return await self.analyze()

    async def import_csv(self, category: Union[Category, str], file_path: str, actor: str) -> int:
        """Replace a category from a CSV file with stored column names.

        Returns:
            Number of rows imported
        """
        category = resolve_category(category)
        rows = read_rows(file_path)
        rows_to_records(category, rows)
        await self.store.replace_all(category, rows, actor)
        self.logger.info(f"Imported {len(rows)} {category.value} rows from {file_path}")
        return len(rows)

    def generate_report(self, report: MonitorReport, format: str = "markdown") -> str:
        """Render a monitor report.

        Args:
            report: Report to render
            format: One of markdown, json, text

        Returns:
            Rendered report
        """
        if format.lower() == "markdown":
            return self._generate_markdown_report(report)
        elif format.lower() == "json":
            return json.dumps({
                "status": report.status,
                "offline": report.offline,
                "result": report.result.model_dump(mode="json") if report.result else None,
                "errors": report.errors,
                "warnings": report.warnings,
            }, indent=2, ensure_ascii=False)
        else:
            return self._generate_text_report(report)

    def _generate_markdown_report(self, report: MonitorReport) -> str:
        lines = ["# Curriculum Quality Analysis Report", ""]

        if report.offline:
            lines.append("> **Offline:** figures come from the last known good snapshot.")
            lines.append("")

        if report.result is None:
            lines.append("## Analysis Failed")
            lines.extend(f"- {error}" for error in report.errors)
            return "\n".join(lines)

        result = report.result
        lines.append(f"**Status:** {result.status.value} ({result.overall_score:.1f}%)")
        lines.append("")

        if report.snapshot is not None and report.snapshot.outcomes:
            calculator = MetricsCalculator()
            lines.append("## Outcome Achievement")
            lines.append("| Outcome | Y1 | Y2 | Y3 | Y4 | Y5 | Y6 | Average | Employer |")
            lines.append("|---|---|---|---|---|---|---|---|---|")
            for record in report.snapshot.outcomes:
                years = " | ".join(f"{v:g}" for v in record.yearly)
                lines.append(
                    f"| {record.id} {record.label} | {years} | "
                    f"{calculator.outcome_average(record):.1f} | {record.employer:g}/5 |"
                )
            lines.append("")

        lines.append(f"## Findings ({len(result.findings)})")
        if result.findings:
            for finding in result.findings:
                lines.append(f"- **{finding.level.value}** [{finding.area}] {finding.detail}")
        else:
            lines.append("No findings.")
        lines.append("")

        lines.append(f"## Action Plan ({len(result.actions)})")
        if result.actions:
            for i, action in enumerate(result.actions, 1):
                lines.append(f"{i}. **{action.priority.value}**: {action.description}")
        else:
            lines.append("No actions required.")
        lines.append("")

        lines.append("## Decision Matrix")
        lines.append("| Level | Criteria | Meaning | Response |")
        lines.append("|---|---|---|---|")
        for level, criteria, meaning, response in DECISION_MATRIX:
            marker = " (current)" if level == result.status.value else ""
            lines.append(f"| {level}{marker} | {criteria} | {meaning} | {response} |")

        if report.warnings:
            lines.append("")
            lines.append("## Warnings")
            lines.extend(f"- {warning}" for warning in report.warnings)

        return "\n".join(lines)

    def _generate_text_report(self, report: MonitorReport) -> str:
        lines = ["CURRICULUM QUALITY ANALYSIS REPORT", "=" * 40]

        if report.offline:
            lines.append("OFFLINE: showing last known good snapshot")

        if report.result is None:
            lines.append("Analysis failed:")
            lines.extend(f"  {error}" for error in report.errors)
            return "\n".join(lines)

        result = report.result
        lines.append(f"Status: {result.status.value} ({result.overall_score:.1f}%)")
        lines.append("")
        lines.append("Findings:")
        for finding in result.findings:
            lines.append(f"  [{finding.level.value}] {finding.area}: {finding.detail}")
        lines.append("")
        lines.append("Actions:")
        for action in result.actions:
            lines.append(f"  [{action.priority.value}] {action.description}")

        for warning in report.warnings:
            lines.append(f"WARNING: {warning}")

        return "\n".join(lines)
