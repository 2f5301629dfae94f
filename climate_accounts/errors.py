"""
HTTP errors returned by the accounts API.

Each error renders as a JSON body with an ``error`` message, plus any extra
``payload`` fields (see :func:`climate_accounts.factory.jsonify_exception`).
"""

from typing import Optional

from werkzeug.exceptions import BadRequest, Conflict, HTTPException, \
    InternalServerError, NotFound, Unauthorized


class PayloadMixin(object):
    """Carries extra fields for the JSON error body."""

    def __init__(self, description: Optional[str] = None,
                 payload: Optional[dict] = None) -> None:
        super(PayloadMixin, self).__init__(description=description)
        self.payload = dict(payload or {})


class ValidationError(PayloadMixin, BadRequest):
    """Missing or malformed input."""


class AuthError(PayloadMixin, HTTPException):
    """Bad credentials (400), or not authenticated at all (401)."""

    code = 400

    def __init__(self, description: Optional[str] = None,
                 payload: Optional[dict] = None, code: int = 400) -> None:
        super(AuthError, self).__init__(description, payload)
        self.code = code


class SessionExpiredError(PayloadMixin, Unauthorized):
    """The session is gone; clients should send the user to log in."""

    def __init__(self, description: Optional[str] = None,
                 reason: str = 'SESSION_EXPIRED') -> None:
        super(SessionExpiredError, self).__init__(
            description, {'expired': True, 'code': reason}
        )


class ConflictError(PayloadMixin, Conflict):
    """The resource already exists."""


class NotFoundError(PayloadMixin, NotFound):
    """The resource does not exist."""


class InternalError(PayloadMixin, InternalServerError):
    """Anything we did not expect, including store and cache failures."""
