"""
Profile updates for session-authenticated users.

Writes go to the user store first and to the cache second. If we die in
between, the store is ahead of the cache, and the next read through
:func:`.resolve_session` notices the drift and repairs it.
"""

from typing import Optional
import logging

from ..domain import SessionProjection
from ..services.exceptions import CacheUnavailable, SessionUpdateFailed
from ..services.session_store import SessionCache
from ..services.users import UserStore
from .exceptions import SessionExpired, UnknownSession
from .reconciler import expire_session
from .tokens import derive

logger = logging.getLogger(__name__)


def update_profile(users: UserStore, cache: SessionCache, token: str,
                   name: Optional[str] = None,
                   phone: Optional[str] = None) -> dict:
    """
    Update the profile of the user holding a session.

    Parameters
    ----------
    users : :class:`.UserStore`
    cache : :class:`.SessionCache`
    token : str
        The session token.
    name : str or None
    phone : str or None
        Fields left as ``None`` are not changed.

    Returns
    -------
    dict
        Wire representation of the updated projection, which has also been
        written to the cache under ``token`` with a fresh expiry.

    Raises
    ------
    :class:`.UnknownSession`
        If no user record holds ``token``.
    :class:`.SessionExpired`
        If the cache no longer holds ``token``.
    :class:`.SessionUpdateFailed`
        If the profile was saved but the cache could not be updated.

    """
    user = users.get_user_by_session_key(token)
    if user is None:
        raise UnknownSession('Invalid session')

    try:
        cached = cache.get(token)
    except CacheUnavailable as e:
        # The record still points here; let the write below fail loudly
        # if the cache is really gone.
        logger.warning('Session cache unavailable while checking %s: %s',
                       token[:8], e)
    else:
        if cached is None:
            expire_session(users, token)
            raise SessionExpired('Session expired - please login again')

    updated = users.update_profile(token, name=name, phone=phone)
    if updated is None:     # Rotated away by a concurrent login.
        raise UnknownSession('Invalid session')

    projection = SessionProjection.from_user(updated)
    data = projection.to_dict()
    try:
        cache.replace(token, data, derive(projection))
    except SessionUpdateFailed:
        logger.error('Profile for %s saved but session %s not updated; it '
                     'will be repaired on next read', updated.user_id,
                     token[:8])
        raise
    logger.debug('Updated profile for %s', updated.user_id)
    return data
