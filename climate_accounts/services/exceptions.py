"""Provides exceptions occurring with external services."""


class NoSuchUser(RuntimeError):
    """User does not exist."""


class PasswordAuthenticationFailed(RuntimeError):
    """Password is not correct."""


class EmailAlreadyRegistered(RuntimeError):
    """A user with this e-mail address already exists."""


class StoreUnavailable(RuntimeError):
    """The user database could not be reached."""


class CacheUnavailable(RuntimeError):
    """The session cache could not be reached, or timed out."""


class SessionCreationFailed(RuntimeError):
    """Failed to create a session in the session cache."""


class SessionUpdateFailed(RuntimeError):
    """Failed to overwrite a session in the session cache."""
