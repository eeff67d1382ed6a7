"""User directory persistence."""

import json
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError

from ..exceptions import TransportError
from ..models.data_models import UserAccount
from ..utils.logging import get_logger


class UserDirectory:
    """User accounts keyed by normalized email.

    Accounts are kept in memory and, when a path is given, mirrored to a JSON
    file after every change.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path).expanduser() if path else None
        self.logger = get_logger("auth.users")
        self._accounts: Dict[str, UserAccount] = {}
        if self.path is not None and self.path.exists():
            self._load()

    def _load(self):
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            accounts = [UserAccount.model_validate(item) for item in raw]
        except (OSError, json.JSONDecodeError, PydanticValidationError) as e:
            raise TransportError(f"Cannot read user directory {self.path}: {e}") from e
        self._accounts = {account.email: account for account in accounts}
        self.logger.debug(f"Loaded {len(self._accounts)} accounts")

    def _flush(self):
        if self.path is None:
            return
        payload = [account.model_dump(mode="json") for account in self._accounts.values()]
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            raise TransportError(f"Cannot write user directory {self.path}: {e}") from e

    def get(self, email: str) -> Optional[UserAccount]:
        return self._accounts.get(email)

    def exists(self, email: str) -> bool:
        return email in self._accounts

    def save(self, account: UserAccount):
        self._accounts[account.email] = account
        self._flush()

    def all(self) -> List[UserAccount]:
        return list(self._accounts.values())
