"""Persistence layer for category tables."""

from .base import RecordStore
from .csv_store import CSVRecordStore, read_rows
from .memory_store import InMemoryRecordStore
from .sample_data import generate_sample_tables
from .snapshot import (
    SnapshotCache,
    records_to_rows,
    resolve_category,
    rows_to_records,
    rows_to_snapshot,
)

__all__ = [
    "RecordStore",
    "CSVRecordStore",
    "InMemoryRecordStore",
    "SnapshotCache",
    "generate_sample_tables",
    "read_rows",
    "records_to_rows",
    "resolve_category",
    "rows_to_records",
    "rows_to_snapshot",
]
