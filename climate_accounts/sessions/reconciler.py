"""
Read-repair of cached session projections.

The cache is advisory and the user store is the source of truth, but the
store is only consulted to validate or refresh what the cache holds, never
to originate a session. Repair replaces the content stored under a token;
it never changes the token.

Concurrent resolutions of the same stale token may both repair it. That is
fine: both build the projection from the same durable read, and the write
is a whole-value replace.
"""

from typing import List
import logging

from ..domain import SessionProjection, stale_fields
from ..services.exceptions import CacheUnavailable, StoreUnavailable
from ..services.session_store import ENVELOPE_VERSION, CachedSession, \
    SessionCache
from ..services.users import UserStore
from .exceptions import SessionExpired
from .tokens import content_digest, derive

logger = logging.getLogger(__name__)


def resolve_session(users: UserStore, cache: SessionCache,
                    token: str) -> dict:
    """
    Get the current projection of the user holding a session.

    Parameters
    ----------
    users : :class:`.UserStore`
    cache : :class:`.SessionCache`
    token : str
        The session token.

    Returns
    -------
    dict
        Wire representation of the projection. If the cached projection is
        up to date it is returned verbatim and the cache is not written, so
        its expiry is unchanged. Otherwise the cache entry is overwritten
        with the current projection and a fresh expiry.

    Raises
    ------
    :class:`.SessionExpired`
        If the cache no longer holds the token (the pointer on the user
        record is cleared), or if no user record holds the token.
    :class:`.SessionUpdateFailed`
        If a stale entry could not be repaired.

    """
    try:
        cached = cache.get(token)
    except CacheUnavailable as e:
        logger.warning('Session cache unavailable, resolving %s from the '
                       'user store: %s', token[:8], e)
        return _resolve_from_store(users, token)

    if cached is None:
        expire_session(users, token)
        raise SessionExpired('Session expired - please login again')

    user = users.get_user_by_session_key(token)
    if user is None:
        logger.debug('No user holds session %s', token[:8])
        raise SessionExpired('Invalid session', SessionExpired.INVALID)

    current = SessionProjection.from_user(user)
    drift = staleness(cached, current)
    if not drift:
        return cached.user

    logger.info('Session %s is stale (%s); repairing cache',
                token[:8], ', '.join(drift))
    data = current.to_dict()
    cache.replace(token, data, derive(current))
    return data


def staleness(cached: CachedSession, current: SessionProjection) -> List[str]:
    """
    Explain why a cache entry no longer matches the user record.

    Returns
    -------
    list
        Empty if the entry is current. Otherwise the names of the drifted
        fields, ``'version'``/``'digest'`` if the envelope itself is out of
        date or does not match its content, or ``'projection'`` if the
        cached projection is malformed (e.g. a field is missing or a
        timestamp does not parse).

    """
    if cached.version != ENVELOPE_VERSION:
        return ['version']
    if cached.digest != content_digest(cached.user):
        return ['digest']
    try:
        SessionProjection.from_dict(cached.user)
    except (KeyError, TypeError, ValueError, OverflowError) as e:
        logger.debug('Cached projection does not decode: %s', e)
        return ['projection']
    return stale_fields(cached.user, current)


def expire_session(users: UserStore, token: str) -> None:
    """Clear the pointer to a session whose cache entry is gone."""
    try:
        cleared = users.clear_session_key(token)
    except StoreUnavailable as e:
        logger.warning('Could not clear expired session %s: %s',
                       token[:8], e)
        return
    logger.info('Session %s expired; cleared %i pointer(s)',
                token[:8], cleared)


def _resolve_from_store(users: UserStore, token: str) -> dict:
    user = users.get_user_by_session_key(token)
    if user is None:
        raise SessionExpired('Invalid session', SessionExpired.INVALID)
    return SessionProjection.from_user(user).to_dict()
