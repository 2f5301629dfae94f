"""
Internal service API for the session cache.

Session projections are stored in redis under the session token, wrapped in
a small envelope that records the schema version and a digest of the
projection content::

    {"version": 1, "digest": "<sha256 hex>", "user": {...}}

Entries are always written whole, with a fresh expiry. Nothing here
decides whether an entry is stale; see :mod:`climate_accounts.sessions`.
"""

from typing import Any, NamedTuple, Optional
import json
import logging
import threading

from flask import Flask, current_app
import redis

from ..connection import ConnectionSupervisor
from ..exceptions import CacheUnavailable, SessionCreationFailed, \
    SessionUpdateFailed

logger = logging.getLogger(__name__)

EXTENSION = 'climate_accounts.session_store'
ENVELOPE_VERSION = 1
_init_lock = threading.Lock()


class CachedSession(NamedTuple):
    """A decoded cache entry."""

    user: dict
    """Wire representation of the cached projection."""

    digest: Optional[str] = None
    """Content digest recorded when the entry was written."""

    version: Optional[int] = None
    """Envelope version; ``None`` if the entry could not be decoded."""


class SessionCache(object):
    """
    Manages a connection to Redis.

    In fact, the StrictRedis instance is thread safe and connections are
    attached at the time a command is executed. This class simply provides a
    container for configuration.
    """

    def __init__(self, r: Any, duration: int = 60 * 60 * 24 * 90,
                 supervisor: Optional[ConnectionSupervisor] = None) -> None:
        self.r = r
        self.duration = duration
        self.supervisor = supervisor or ConnectionSupervisor('cache',
                                                             self._ping)

    def get(self, token: str) -> Optional[CachedSession]:
        """
        Load a cache entry by session token.

        Returns
        -------
        :class:`.CachedSession` or None
            ``None`` if there is no entry for ``token``.

        Raises
        ------
        :class:`.CacheUnavailable`
            If redis could not be reached or timed out.

        """
        try:
            raw = self.r.get(token)
        except (redis.exceptions.ConnectionError,
                redis.exceptions.TimeoutError) as e:
            self.supervisor.mark_down(e)
            raise CacheUnavailable(f'Connection failed: {e}') from e
        except redis.exceptions.RedisError as e:
            raise CacheUnavailable(f'Failed to read: {e}') from e
        self.supervisor.mark_up()
        if not raw:
            return None
        return _decode(raw)

    def create(self, token: str, user: dict, digest: str) -> None:
        """Store a new session under ``token``."""
        try:
            self._set(token, user, digest)
        except redis.exceptions.ConnectionError as e:
            raise SessionCreationFailed(f'Connection failed: {e}') from e
        except Exception as e:
            raise SessionCreationFailed(f'Failed to create: {e}') from e

    def replace(self, token: str, user: dict, digest: str) -> None:
        """Overwrite the session under ``token`` and reset its expiry."""
        try:
            self._set(token, user, digest)
        except redis.exceptions.ConnectionError as e:
            raise SessionUpdateFailed(f'Connection failed: {e}') from e
        except Exception as e:
            raise SessionUpdateFailed(f'Failed to update: {e}') from e

    def delete(self, token: str) -> None:
        """Delete a session in the key-value store."""
        try:
            self.r.delete(token)
        except (redis.exceptions.ConnectionError,
                redis.exceptions.TimeoutError) as e:
            self.supervisor.mark_down(e)
            raise CacheUnavailable(f'Connection failed: {e}') from e
        except redis.exceptions.RedisError as e:
            raise CacheUnavailable(f'Failed to delete: {e}') from e

    def ttl(self, token: str) -> int:
        """
        Seconds until the entry for ``token`` expires.

        Negative if there is no such entry (-2) or it has no expiry (-1).
        """
        try:
            remaining: int = self.r.ttl(token)
        except (redis.exceptions.ConnectionError,
                redis.exceptions.TimeoutError) as e:
            self.supervisor.mark_down(e)
            raise CacheUnavailable(f'Connection failed: {e}') from e
        except redis.exceptions.RedisError as e:
            raise CacheUnavailable(f'Failed to read expiry: {e}') from e
        return remaining

    def close(self) -> None:
        self.r.close()

    def _ping(self) -> None:
        self.r.ping()

    def _set(self, token: str, user: dict, digest: str) -> None:
        data = json.dumps({
            'version': ENVELOPE_VERSION,
            'digest': digest,
            'user': user
        })
        try:
            self.r.set(token, data, ex=self.duration)
        except (redis.exceptions.ConnectionError,
                redis.exceptions.TimeoutError) as e:
            self.supervisor.mark_down(e)
            raise
        self.supervisor.mark_up()


def _decode(raw: Any) -> CachedSession:
    try:
        data = json.loads(raw)
    except ValueError:
        logger.warning('Undecodable session entry')
        return CachedSession(user={})
    if not isinstance(data, dict):
        return CachedSession(user={})
    if 'version' not in data:   # A bare projection, without the envelope.
        return CachedSession(user=data)
    user = data.get('user')
    return CachedSession(
        user=user if isinstance(user, dict) else {},
        digest=data.get('digest'),
        version=data.get('version')
    )


def init_app(app: Flask, cache: Optional[SessionCache] = None) -> None:
    """Set default configuration parameters for an application instance."""
    app.config.setdefault('REDIS_HOST', 'localhost')
    app.config.setdefault('REDIS_PORT', '6379')
    app.config.setdefault('REDIS_DATABASE', '0')
    app.config.setdefault('REDIS_TOKEN', None)
    app.config.setdefault('REDIS_TIMEOUT', '5')
    app.config.setdefault('SESSION_DURATION', str(60 * 60 * 24 * 90))
    if cache is not None:
        app.extensions[EXTENSION] = cache


def get_session_cache(app: Flask) -> SessionCache:
    """Get a new :class:`.SessionCache` for the configured redis."""
    config = app.config
    timeout = float(config.get('REDIS_TIMEOUT', '5'))
    if config.get('REDIS_FAKE'):
        import fakeredis
        r = fakeredis.FakeStrictRedis()
    elif config.get('REDIS_URL'):
        r = redis.StrictRedis.from_url(config['REDIS_URL'],
                                       socket_timeout=timeout,
                                       socket_connect_timeout=timeout)
    else:
        r = redis.StrictRedis(host=config.get('REDIS_HOST', 'localhost'),
                              port=int(config.get('REDIS_PORT', '6379')),
                              db=int(config.get('REDIS_DATABASE', '0')),
                              password=config.get('REDIS_TOKEN', None),
                              socket_timeout=timeout,
                              socket_connect_timeout=timeout)
    logger.debug('New Redis connection for session cache')
    duration = int(config.get('SESSION_DURATION', str(60 * 60 * 24 * 90)))
    cache = SessionCache(r, duration)
    cache.supervisor = ConnectionSupervisor(
        'cache', cache._ping,
        max_attempts=int(config.get('RECONNECT_MAX_ATTEMPTS', '10')),
        delay=float(config.get('RECONNECT_DELAY', '1')),
        max_delay=float(config.get('RECONNECT_MAX_DELAY', '5'))
    )
    return cache


def current_cache(app: Optional[Flask] = None) -> SessionCache:
    """Get/create the process-wide :class:`.SessionCache`."""
    app = app or current_app._get_current_object()     # type: ignore
    with _init_lock:
        if EXTENSION not in app.extensions:
            app.extensions[EXTENSION] = get_session_cache(app)
    cache: SessionCache = app.extensions[EXTENSION]
    return cache
