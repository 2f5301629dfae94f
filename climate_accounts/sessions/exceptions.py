"""Exceptions raised while resolving or mutating a session."""


class SessionExpired(RuntimeError):
    """The session is no longer valid; the user must log in again."""

    EXPIRED = 'SESSION_EXPIRED'
    """The cache entry is gone."""

    INVALID = 'SESSION_INVALID'
    """No user record points at the token any more."""

    def __init__(self, message: str, reason: str = EXPIRED) -> None:
        super(SessionExpired, self).__init__(message)
        self.reason = reason


class UnknownSession(RuntimeError):
    """No user record holds this session token."""
