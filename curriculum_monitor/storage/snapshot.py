"""Conversion between stored table rows and snapshot records."""

from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from ..exceptions import NotFoundError, TransportError, ValidationError
from ..models.data_models import CATEGORY_MODELS, Category, MetricSnapshot
from ..utils.logging import get_logger

logger = get_logger("storage.snapshot")

# Stored column name -> record field name, in table column order.
COLUMN_MAPS: Dict[Category, Dict[str, str]] = {
    Category.OUTCOME: {
        "plo_id": "id",
        "plo_name": "label",
        "y1": "y1",
        "y2": "y2",
        "y3": "y3",
        "y4": "y4",
        "y5": "y5",
        "y6": "y6",
        "employer": "employer",
        "graduate": "graduate",
    },
    Category.LICENSING_EXAM: {
        "exam_name": "label",
        "pass_rate": "pass_rate",
        "mean_score": "mean_score",
        "national_avg": "national_average",
    },
    Category.COURSE_QUALITY: {
        "course_name": "label",
        "clo_achieve": "clo_achievement",
        "reliability": "reliability",
        "difficulty": "difficulty",
        "discrimination": "discrimination",
        "pass_rate": "pass_rate",
    },
    Category.TREND: {
        "year": "year",
        "graduation": "graduation",
        "nl_pass": "licensing_pass",
        "employer_score": "employer_score",
        "retention": "retention",
    },
}

TABLE_NAMES = {
    Category.OUTCOME: "plo_data",
    Category.LICENSING_EXAM: "nl_data",
    Category.COURSE_QUALITY: "course_data",
    Category.TREND: "trend_data",
}

SAVE_ACTIONS = {
    Category.OUTCOME: "SAVE_PLO",
    Category.LICENSING_EXAM: "SAVE_NL",
    Category.COURSE_QUALITY: "SAVE_COURSE",
    Category.TREND: "SAVE_TREND",
}


def resolve_category(category: Union[Category, str]) -> Category:
    """Resolve a category by value or table name.

    Raises:
        NotFoundError: If the category is unknown
    """
    if isinstance(category, Category):
        return category
    for candidate in Category:
        if category in (candidate.value, candidate.name.lower(), TABLE_NAMES[candidate]):
            return candidate
    raise NotFoundError(f"Unknown category: {category}")


def columns_for(category: Category) -> List[str]:
    return list(COLUMN_MAPS[resolve_category(category)])


def rows_to_records(category: Union[Category, str], rows: Iterable[Mapping[str, Any]]) -> list:
    """Build records from stored rows.

    Args:
        category: Category the rows belong to
        rows: Rows keyed by stored column name

    Returns:
        List of records

    Raises:
        ValidationError: If any row has a missing or malformed field
    """
    category = resolve_category(category)
    column_map = COLUMN_MAPS[category]
    model = CATEGORY_MODELS[category]

    records = []
    errors = []
    for index, row in enumerate(rows, 1):
        data = {field: row.get(column) for column, field in column_map.items()}
        try:
            records.append(model.model_validate(data))
        except PydanticValidationError as e:
            for error in e.errors():
                field = ".".join(str(part) for part in error["loc"])
                errors.append(f"{category.value} row {index}: {field}: {error['msg']}")

    if errors:
        raise ValidationError(
            f"{len(errors)} invalid field(s) in {category.value}", errors
        )
    return records


def records_to_rows(category: Union[Category, str], records: Iterable[Any]) -> List[Dict[str, Any]]:
    """Inverse of ``rows_to_records``."""
    category = resolve_category(category)
    column_map = COLUMN_MAPS[category]
    rows = []
    for record in records:
        data = record.model_dump() if hasattr(record, "model_dump") else dict(record)
        rows.append({column: data.get(field) for column, field in column_map.items()})
    return rows


def rows_to_snapshot(tables: Mapping[Category, Iterable[Mapping[str, Any]]]) -> MetricSnapshot:
    """Build a snapshot from all category tables.

    Raises:
        ValidationError: If any table has invalid rows
    """
    records = {}
    errors = []
    for category in Category:
        try:
            records[category] = rows_to_records(category, tables.get(category, []))
        except ValidationError as e:
            errors.extend(e.errors)

    if errors:
        raise ValidationError(f"Snapshot has {len(errors)} invalid field(s)", errors)

    return MetricSnapshot(
        outcomes=records[Category.OUTCOME],
        licensing_exams=records[Category.LICENSING_EXAM],
        courses=records[Category.COURSE_QUALITY],
        trends=records[Category.TREND],
    )


class SnapshotCache:
    """Last-known-good snapshot kept on disk as JSON."""

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path) if path else None
        self._snapshot: Optional[MetricSnapshot] = None

    def save(self, snapshot: MetricSnapshot):
        self._snapshot = snapshot
        if self.path is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(snapshot.model_dump_json(indent=2), encoding="utf-8")
        except OSError as e:
            raise TransportError(f"Cannot write snapshot cache {self.path}: {e}") from e

    def load(self) -> Optional[MetricSnapshot]:
        """Return the cached snapshot, or None if nothing was cached."""
        if self._snapshot is not None:
            return self._snapshot
        if self.path is None or not self.path.exists():
            return None
        try:
            self._snapshot = MetricSnapshot.model_validate_json(
                self.path.read_text(encoding="utf-8")
            )
        except (OSError, PydanticValidationError) as e:
            logger.warning(f"Ignoring unreadable snapshot cache {self.path}: {e}")
            return None
        return self._snapshot
