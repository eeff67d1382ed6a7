"""CSV-backed record store."""

import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import chardet
import pandas as pd

from ..exceptions import TransportError
from ..models.data_models import AuditEntry, Category
from .base import RecordStore
from .snapshot import TABLE_NAMES, columns_for

AUDIT_COLUMNS = ["timestamp", "user_email", "action", "details"]


def detect_encoding(file_path: str) -> str:
    """Detect file encoding.

    Args:
        file_path: Path to file

    Returns:
        Detected encoding
    """
    with open(file_path, 'rb') as f:
        raw_data = f.read(10000)  # Read first 10KB
        result = chardet.detect(raw_data)
        return result['encoding'] or 'utf-8'


def read_rows(file_path: str, encoding: Optional[str] = None) -> List[Dict[str, Any]]:
    """Read a CSV file into rows of strings.

    Cells are kept as text so that blank or malformed values reach model
    validation instead of being turned into NaN.

    Raises:
        TransportError: If the file cannot be read or parsed
    """
    try:
        if not encoding:
            encoding = detect_encoding(file_path)
        df = pd.read_csv(file_path, dtype=str, keep_default_na=False, encoding=encoding)
    except pd.errors.EmptyDataError:
        return []
    except (OSError, UnicodeDecodeError, pd.errors.ParserError) as e:
        raise TransportError(f"Cannot read {file_path}: {e}") from e
    df.columns = [str(col).strip() for col in df.columns]
    return df.to_dict(orient="records")


class CSVRecordStore(RecordStore):
    """Record store keeping one CSV file per category in a data directory."""

    def __init__(self, data_dir: str):
        """Initialize CSV store.

        Args:
            data_dir: Directory holding the category tables
        """
        super().__init__()
        self.data_dir = Path(data_dir).expanduser()

    def table_path(self, category: Category) -> Path:
        return self.data_dir / f"{TABLE_NAMES[category]}.csv"

    @property
    def audit_path(self) -> Path:
        return self.data_dir / "audit_log.csv"

    async def _read_table(self, category: Category) -> List[Dict[str, Any]]:
        path = self.table_path(category)
        if not path.exists():
            self.logger.debug(f"No table for {category.value} at {path}")
            return []
        return read_rows(str(path), encoding="utf-8")

    async def _write_table(self, category: Category, rows: List[Dict[str, Any]]):
        path = self.table_path(category)
        df = pd.DataFrame(rows, columns=columns_for(category) + ["updated_at"])
        tmp_path = path.with_suffix(".csv.tmp")
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            df.to_csv(tmp_path, index=False, encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as e:
            raise TransportError(f"Cannot write {path}: {e}") from e

    async def _append_audit(self, entry: AuditEntry):
        path = self.audit_path
        df = pd.DataFrame([{
            "timestamp": entry.timestamp.isoformat(),
            "user_email": entry.actor,
            "action": entry.action,
            "details": entry.details,
        }], columns=AUDIT_COLUMNS)
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            df.to_csv(path, mode="a", header=not path.exists(), index=False, encoding="utf-8")
        except OSError as e:
            raise TransportError(f"Cannot append to {path}: {e}") from e

    async def _read_audit(self) -> List[AuditEntry]:
        if not self.audit_path.exists():
            return []
        return [
            AuditEntry(
                timestamp=row["timestamp"],
                actor=row.get("user_email", ""),
                action=row["action"],
                details=row.get("details", ""),
            )
            for row in read_rows(str(self.audit_path), encoding="utf-8")
        ]
