"""
Sessions: issuing, resolving, and updating them.

A session ties a user record in the durable store to a projection of that
user in the session cache. The functions here take the store and cache
handles explicitly, so that callers decide which instances are used.
"""

from .coordinator import update_profile
from .exceptions import SessionExpired, UnknownSession
from .login import LoginResult, login
from .reconciler import expire_session, resolve_session, staleness
from .tokens import content_digest, derive, new_session_token

__all__ = ['LoginResult', 'SessionExpired', 'UnknownSession',
           'content_digest', 'derive', 'expire_session', 'login',
           'new_session_token', 'resolve_session', 'staleness',
           'update_profile']
