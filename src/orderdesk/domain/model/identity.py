"""Caller identity, as supplied by the upstream authentication layer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from orderdesk.domain.exceptions import AuthenticationError, PermissionDeniedError


class Role(Enum):
    USER = "user"
    ADMIN = "admin"


@dataclass(frozen=True)
class Identity:
    """An authenticated caller.

    The engine trusts the user id it is given but still scopes every read
    to it.
    """

    user_id: str
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    @staticmethod
    def of(user_id: str | None, role: str | None = None) -> Identity:
        """Build an identity from raw values, rejecting unusable ones."""
        if not user_id or not user_id.strip():
            raise AuthenticationError("Unauthorized")
        try:
            parsed_role = Role((role or Role.USER.value).strip().lower())
        except ValueError as exc:
            raise AuthenticationError(f"Unknown role: {role!r}") from exc
        return Identity(user_id=user_id.strip(), role=parsed_role)


def require_identity(identity: Identity | None) -> Identity:
    if identity is None:
        raise AuthenticationError("Unauthorized")
    return identity


def require_admin(identity: Identity | None) -> Identity:
    identity = require_identity(identity)
    if not identity.is_admin:
        raise PermissionDeniedError("Administrator access required")
    return identity
