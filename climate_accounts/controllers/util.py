"""Helpers for controllers."""

from typing import Any, Optional, Tuple

from werkzeug.datastructures import MultiDict
from wtforms import Form

from ..errors import ValidationError

ResponseData = Tuple[dict, int, dict]


def form_data(params: Any) -> MultiDict:
    """
    Adapt a decoded JSON body for a :class:`wtforms.Form`.

    Scalar values are passed as strings; ``null`` and nested values are
    dropped, so they count as missing.
    """
    if not isinstance(params, dict):
        raise ValidationError('Request body must be a JSON object.')
    return MultiDict({
        key: str(value) for key, value in params.items()
        if value is not None and not isinstance(value, (dict, list))
    })


def is_missing(form: Form) -> bool:
    """Whether any field in ``form`` was left empty."""
    return any(not field.data or not str(field.data).strip()
               for field in form)


def bearer_token(header: Optional[str]) -> Optional[str]:
    """Get the token from an ``Authorization: Bearer <token>`` header."""
    if not header:
        return None
    parts = header.split()
    if len(parts) != 2 or parts[0].lower() != 'bearer':
        raise ValidationError('Auth header is malformed')
    return parts[1]
