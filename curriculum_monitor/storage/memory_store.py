"""In-memory record store."""

from typing import Any, Dict, List, Mapping, Optional, Sequence

from ..models.data_models import AuditEntry, Category
from .base import RecordStore


class InMemoryRecordStore(RecordStore):
    """Record store kept in process memory."""

    def __init__(self, tables: Optional[Mapping[Category, Sequence[Mapping[str, Any]]]] = None):
        super().__init__()
        self._tables: Dict[Category, List[Dict[str, Any]]] = {c: [] for c in Category}
        for category, rows in (tables or {}).items():
            self._tables[Category(category)] = [dict(row) for row in rows]
        self._audit: List[AuditEntry] = []

    async def _read_table(self, category: Category) -> List[Dict[str, Any]]:
        return [dict(row) for row in self._tables[category]]

    async def _write_table(self, category: Category, rows: List[Dict[str, Any]]):
        self._tables[category] = [dict(row) for row in rows]

    async def _append_audit(self, entry: AuditEntry):
        self._audit.append(entry)

    async def _read_audit(self) -> List[AuditEntry]:
        return list(self._audit)
