"""
Supervises the connection to an external backend.

The redis and database clients attach connections lazily when a command is
executed, so there is no long-lived socket to babysit. What we track is
whether the last operations succeeded. When one fails, a single background
task probes the backend with bounded exponential backoff until it answers
or the attempts run out. Once the attempts are exhausted the supervisor
stays ``FAILED``: requests keep going straight to the backend and observe
its errors directly, and no new reconnection task is started until an
operation succeeds again.
"""

from enum import Enum
from typing import Callable, Optional
import logging
import threading

from retry.api import retry_call

logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """States of a :class:`.ConnectionSupervisor`."""

    DISCONNECTED = 'disconnected'
    CONNECTING = 'connecting'
    CONNECTED = 'connected'
    FAILED = 'failed'


class ConnectionSupervisor(object):
    """
    Tracks the health of one backend and drives reconnection.

    Parameters
    ----------
    name : str
        Used in log messages, e.g. ``'cache'``.
    probe : callable
        Raises if the backend is not reachable, e.g. a redis ``PING``.
    max_attempts : int
        Number of probes before giving up.
    delay : float
        Seconds to wait after the first failed probe; doubled after each
        subsequent failure.
    max_delay : float
        Upper bound on the wait between probes.

    """

    def __init__(self, name: str, probe: Callable[[], object],
                 max_attempts: int = 10, delay: float = 1.0,
                 max_delay: float = 5.0) -> None:
        self.name = name
        self._probe = probe
        self._max_attempts = max_attempts
        self._delay = delay
        self._max_delay = max_delay
        self._lock = threading.Lock()
        self._state = ConnectionState.DISCONNECTED
        self._task: Optional[threading.Thread] = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    def mark_up(self) -> None:
        """Record a successful operation against the backend."""
        with self._lock:
            if self._state is not ConnectionState.CONNECTED:
                logger.info('%s: connected', self.name)
            self._state = ConnectionState.CONNECTED

    def mark_down(self, error: Optional[BaseException] = None) -> None:
        """Record a failed operation and start reconnecting if needed."""
        with self._lock:
            if self._state in (ConnectionState.CONNECTING,
                               ConnectionState.FAILED):
                return
            logger.warning('%s: connection lost: %s', self.name, error)
            self._state = ConnectionState.CONNECTING
            self._task = threading.Thread(target=self.reconnect,
                                          name=f'{self.name}-reconnect',
                                          daemon=True)
        self._task.start()

    def reconnect(self) -> bool:
        """
        Probe the backend until it answers or the attempts run out.

        Returns
        -------
        bool
            ``True`` if the backend answered.

        """
        with self._lock:
            self._state = ConnectionState.CONNECTING
        try:
            retry_call(self._probe, exceptions=Exception,
                       tries=self._max_attempts, delay=self._delay,
                       max_delay=self._max_delay, backoff=2, logger=logger)
        except Exception as e:
            logger.error('%s: giving up after %i reconnection attempts: %s',
                         self.name, self._max_attempts, e)
            with self._lock:
                self._state = ConnectionState.FAILED
            return False
        self.mark_up()
        return True

    def is_available(self) -> bool:
        """Check the backend right now, without retrying."""
        try:
            self._probe()
        except Exception as e:
            logger.error('%s: encountered an error talking to backend: %s',
                         self.name, e)
            return False
        self.mark_up()
        return True
