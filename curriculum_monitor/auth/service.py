"""Authentication service.

Passwords and one-time reset codes are stored only as bcrypt hashes. Reset
codes are handed to a delivery channel and never returned to the caller.
"""

import secrets
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Optional, Union

import bcrypt

from ..exceptions import AuthError, ConflictError, NotFoundError, ValidationError
from ..models.data_models import Role, Session, UserAccount, UserProfile
from ..storage.base import RecordStore
from ..utils.config import Config
from ..utils.logging import get_logger
from ..utils.validation import validate_email, validate_password
from .users import UserDirectory

ROLE_AVATARS = {
    Role.CHAIR: "👑",
    Role.FACULTY: "🎓",
    Role.QA: "📋",
    Role.ADMIN: "⚙️",
}

# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72

CodeDelivery = Callable[[str, str], None]


class OutboxDelivery:
    """Deliver reset codes by dropping a message file into an outbox directory."""

    def __init__(self, outbox_dir: str):
        self.outbox_dir = Path(outbox_dir).expanduser()

    def __call__(self, email: str, code: str):
        self.outbox_dir.mkdir(parents=True, exist_ok=True)
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%f")
        message = self.outbox_dir / f"{stamp}-{email.replace('@', '_at_')}.txt"
        message.write_text(
            f"To: {email}\nSubject: Password reset code\n\nYour one-time code is {code}\n",
            encoding="utf-8",
        )


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


class AuthService:
    """Register, log in and reset passwords for program staff."""

    def __init__(
        self,
        directory: UserDirectory,
        delivery: CodeDelivery,
        store: Optional[RecordStore] = None,
        config: Optional[Config] = None
    ):
        """Initialize authentication service.

        Args:
            directory: User account directory
            delivery: Channel receiving (email, code) for password resets
            store: Record store receiving audit entries
            config: Configuration instance
        """
        self.directory = directory
        self.delivery = delivery
        self.store = store
        self.config = config or Config()
        self.logger = get_logger("auth")

    def _hash(self, secret: str) -> str:
        salt = bcrypt.gensalt(rounds=self.config.bcrypt_rounds)
        return bcrypt.hashpw(secret.encode("utf-8"), salt).decode("utf-8")

    @staticmethod
    def _matches(secret: str, hashed: Optional[str]) -> bool:
        if not secret or not hashed:
            return False
        encoded = secret.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            return False
        return bcrypt.checkpw(encoded, hashed.encode("utf-8"))

    def _check_new_password(self, password: Optional[str]):
        is_valid, error = validate_password(password, self.config.min_password_length)
        if not is_valid:
            raise ValidationError(error)
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")

    async def _audit(self, email: str, action: str, details: str = ""):
        if self.store is not None:
            await self.store.log_action(email, action, details)

    async def register(
        self,
        email: str,
        password: str,
        name: str,
        role: Union[Role, str, None] = None
    ) -> UserProfile:
        """Register a new account.

        Raises:
            ValidationError: If a field is missing or invalid
            ConflictError: If the email is already registered
        """
        email = normalize_email(email)
        is_valid, error = validate_email(email)
        if not is_valid:
            raise ValidationError(error)
        if not name or not name.strip():
            raise ValidationError("Name is required")
        self._check_new_password(password)

        try:
            role = Role(role) if role else Role.FACULTY
        except ValueError as e:
            raise ValidationError(f"Unknown role: {role}") from e

        if self.directory.exists(email):
            raise ConflictError(f"Email already registered: {email}")

        account = UserAccount(
            id=f"u{uuid.uuid4().hex[:12]}",
            email=email,
            name=name.strip(),
            role=role,
            avatar=ROLE_AVATARS[role],
            password_hash=self._hash(password),
        )
        self.directory.save(account)
        await self._audit(email, "REGISTER", f"registered with role {role.value}")
        self.logger.info(f"Registered {email} as {role.value}")
        return account.profile()

    async def login(self, email: str, password: str) -> Session:
        """Check credentials and issue a session.

        Raises:
            ValidationError: If email or password is missing
            AuthError: If the credentials do not match
        """
        email = normalize_email(email)
        if not email or not password:
            raise ValidationError("Email and password are required")

        account = self.directory.get(email)
        if account is None or not self._matches(password, account.password_hash):
            self.logger.warning(f"Failed login for {email}")
            raise AuthError("Email or password is incorrect")

        account = account.model_copy(update={"last_login": datetime.now(timezone.utc)})
        self.directory.save(account)
        await self._audit(email, "LOGIN", "logged in")
        return Session(token=uuid.uuid4().hex, profile=account.profile())

    async def request_password_reset(self, email: str) -> None:
        """Issue a one-time reset code through the delivery channel.

        Raises:
            NotFoundError: If no account uses the email
        """
        email = normalize_email(email)
        account = self.directory.get(email)
        if account is None:
            raise NotFoundError(f"No account for {email}")

        code = str(100000 + secrets.randbelow(900000))
        expires = datetime.now(timezone.utc) + timedelta(minutes=self.config.reset_code_ttl_minutes)
        self.directory.save(account.model_copy(update={
            "reset_code_hash": self._hash(code),
            "reset_expires_at": expires,
        }))
        self.delivery(email, code)
        await self._audit(email, "RESET_PASSWORD", "reset code issued")
        self.logger.info(f"Reset code issued for {email}")

    async def change_password(self, email: str, new_password: str, code: str) -> bool:
        """Set a new password using a reset code.

        Raises:
            ValidationError: If the new password is invalid
            NotFoundError: If no account uses the email
            AuthError: If the code is wrong or expired
        """
        email = normalize_email(email)
        account = self.directory.get(email)
        if account is None:
            raise NotFoundError(f"No account for {email}")
        self._check_new_password(new_password)

        expires = account.reset_expires_at
        if expires is None or expires < datetime.now(timezone.utc):
            raise AuthError("Reset code expired or not requested")
        if not self._matches(code, account.reset_code_hash):
            raise AuthError("Reset code is incorrect")

        self.directory.save(account.model_copy(update={
            "password_hash": self._hash(new_password),
            "reset_code_hash": None,
            "reset_expires_at": None,
        }))
        await self._audit(email, "CHANGE_PASSWORD", "password changed")
        self.logger.info(f"Password changed for {email}")
        return True
