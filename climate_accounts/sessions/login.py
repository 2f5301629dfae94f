"""Issue sessions for users who log in with their password."""

from typing import NamedTuple
import logging

from ..domain import SessionProjection
from ..services.exceptions import CacheUnavailable
from ..services.session_store import SessionCache
from ..services.users import UserStore
from .tokens import derive, new_session_token

logger = logging.getLogger(__name__)


class LoginResult(NamedTuple):
    """Outcome of a successful login."""

    token: str
    user: dict
    """Public profile (the projection's wire representation)."""

    reused: bool = False
    """Whether an existing, still-cached session was handed back."""


def login(users: UserStore, cache: SessionCache, email: str,
          password: str) -> LoginResult:
    """
    Authenticate a user and get them a session.

    If the user record already points at a session that is still in the
    cache, that token is handed back as-is: nothing is recomputed or
    rewritten. Otherwise a new token is issued, the user record is pointed
    at it, and the current projection is cached under it with a fresh
    expiry.

    Parameters
    ----------
    users : :class:`.UserStore`
    cache : :class:`.SessionCache`
    email : str
        Matched case-insensitively.
    password : str

    Returns
    -------
    :class:`.LoginResult`

    Raises
    ------
    :class:`.NoSuchUser`
    :class:`.PasswordAuthenticationFailed`
    :class:`.SessionCreationFailed`
        If the new session could not be written to the cache.

    """
    user = users.authenticate(email, password)
    projection = SessionProjection.from_user(user)

    if user.session_key:
        try:
            cached = cache.get(user.session_key)
        except CacheUnavailable as e:
            logger.warning('Session cache unavailable; issuing a new '
                           'session for %s: %s', user.user_id, e)
            cached = None
        if cached is not None:
            logger.debug('Reusing session %s for %s',
                         user.session_key[:8], user.user_id)
            return LoginResult(user.session_key, projection.to_dict(), True)

    token = new_session_token()
    users.set_session_key(user.user_id, token)
    data = projection.to_dict()
    cache.create(token, data, derive(projection))
    logger.info('Created session %s for %s', token[:8], user.user_id)
    return LoginResult(token, data)
