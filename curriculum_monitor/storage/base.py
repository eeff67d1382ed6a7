"""Base record store for category tables."""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from ..models.data_models import AuditEntry, Category
from ..utils.logging import get_logger
from .snapshot import SAVE_ACTIONS, columns_for, resolve_category


class RecordStore(ABC):
    """Abstract row store holding one table per category.

    Writes replace a whole category table; there is no merge and the last
    writer wins. Every write appends one audit entry.
    """

    def __init__(self, name: Optional[str] = None):
        """Initialize record store.

        Args:
            name: Store name for logging
        """
        self.name = name or self.__class__.__name__
        self.logger = get_logger(f"storage.{self.name}")

    @abstractmethod
    async def _read_table(self, category: Category) -> List[Dict[str, Any]]:
        """Read all rows of a category table."""
        pass

    @abstractmethod
    async def _write_table(self, category: Category, rows: List[Dict[str, Any]]):
        """Replace all rows of a category table."""
        pass

    @abstractmethod
    async def _append_audit(self, entry: AuditEntry):
        """Append one audit entry."""
        pass

    @abstractmethod
    async def _read_audit(self) -> List[AuditEntry]:
        """Read the audit log, oldest first."""
        pass

    async def fetch_all(self, category: Union[Category, str]) -> List[Dict[str, Any]]:
        """Return the full current table for a category.

        Raises:
            NotFoundError: If the category is unknown
            TransportError: If the store cannot be read
        """
        category = resolve_category(category)
        rows = await self._read_table(category)
        self.logger.debug(f"Fetched {len(rows)} {category.value} rows")
        return rows

    async def fetch_tables(self) -> Dict[Category, List[Dict[str, Any]]]:
        """Fetch every category table."""
        return {category: await self.fetch_all(category) for category in Category}

    async def replace_all(
        self,
        category: Union[Category, str],
        rows: Sequence[Mapping[str, Any]],
        actor: str
    ) -> bool:
        """Discard a category table and write the given rows.

        Args:
            category: Category to replace
            rows: Rows keyed by stored column name
            actor: Identity recorded in the audit log

        Returns:
            True once the table and audit entry are written

        Raises:
            NotFoundError: If the category is unknown
            TransportError: If the store cannot be written
        """
        category = resolve_category(category)
        now = datetime.now(timezone.utc).isoformat()
        columns = columns_for(category)

        stamped = []
        for row in rows:
            data = {column: row.get(column) for column in columns}
            data["updated_at"] = now
            stamped.append(data)

        await self._write_table(category, stamped)
        await self.log_action(
            actor, SAVE_ACTIONS[category], f"saved {len(stamped)} {category.value} rows"
        )
        self.logger.info(f"{actor or 'unknown'} replaced {category.value} with {len(stamped)} rows")
        return True

    async def log_action(self, actor: str, action: str, details: str = ""):
        """Append an audit entry."""
        await self._append_audit(AuditEntry(actor=actor or "", action=action, details=details))

    async def fetch_audit_log(self, limit: int = 100) -> List[AuditEntry]:
        """Return the most recent audit entries, newest first."""
        entries = await self._read_audit()
        return list(reversed(entries[-limit:])) if limit > 0 else []
