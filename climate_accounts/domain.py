"""Defines user and session concepts for the accounts service."""

from typing import Any, List, NamedTuple, Optional
from datetime import datetime

import dateutil.parser
from pytz import UTC

COMPARED_FIELDS = ('name', 'email', 'phone', 'resetTokenUsed',
                   'resetTokenTime')
"""
Projection fields that can drift between the cache and the user record.

``userid`` and ``createdAt`` are immutable and never compared.
"""


class UserRegistration(NamedTuple):
    """Data submitted to create an account."""

    name: str
    email: str
    phone: str
    password: str


class User(NamedTuple):
    """A user record, as held in the durable store."""

    user_id: str
    """Opaque, immutable identifier assigned at registration."""

    email: str
    """Lowercased e-mail address; unique."""

    name: str
    phone: str

    created_at: datetime
    """When the account was created (UTC)."""

    session_key: Optional[str] = None
    """The session token currently associated with this user, if any."""

    reset_token_used: bool = False
    reset_token_time: Optional[datetime] = None


class SessionProjection(NamedTuple):
    """
    Denormalized snapshot of a user, safe to cache and transmit.

    Never includes the password verifier or the session token.
    """

    name: str
    email: str
    phone: str
    user_id: str
    created_at: datetime
    reset_token_used: bool = False
    reset_token_time: Optional[datetime] = None

    @classmethod
    def from_user(cls, user: User) -> 'SessionProjection':
        """Build the current projection of a :class:`.User`."""
        return cls(
            name=user.name,
            email=user.email,
            phone=user.phone,
            user_id=user.user_id,
            created_at=user.created_at,
            reset_token_used=bool(user.reset_token_used),
            reset_token_time=user.reset_token_time or None
        )

    def to_dict(self) -> dict:
        """Wire representation; key order is fixed."""
        return {
            'name': self.name,
            'email': self.email,
            'phone': self.phone,
            'userid': self.user_id,
            'createdAt': _isoformat(self.created_at),
            'resetTokenUsed': self.reset_token_used,
            'resetTokenTime': _isoformat(self.reset_token_time),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'SessionProjection':
        """Inverse of :meth:`to_dict`."""
        return cls(
            name=data['name'],
            email=data['email'],
            phone=data['phone'],
            user_id=data['userid'],
            created_at=_parse(data['createdAt']),
            reset_token_used=bool(data.get('resetTokenUsed', False)),
            reset_token_time=_parse(data.get('resetTokenTime'))
        )


def stale_fields(cached: dict, current: SessionProjection) -> List[str]:
    """
    Compare a cached projection against the current one, field by field.

    Parameters
    ----------
    cached : dict
        Wire representation of the projection found in the cache.
    current : :class:`.SessionProjection`
        Projection built from the durable record.

    Returns
    -------
    list
        Names of the fields whose values differ. Empty if the cached
        projection is up to date.

    """
    fresh = current.to_dict()
    return [key for key in COMPARED_FIELDS if cached.get(key) != fresh[key]]


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Coerce a datetime to UTC; naive values are assumed to be UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    value = as_utc(value)
    return value.isoformat() if value is not None else None


def _parse(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return as_utc(value)
    return as_utc(dateutil.parser.parse(value))
