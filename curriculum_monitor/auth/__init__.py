"""Authentication boundary."""

from .service import AuthService, OutboxDelivery
from .users import UserDirectory

__all__ = [
    "AuthService",
    "OutboxDelivery",
    "UserDirectory",
]
