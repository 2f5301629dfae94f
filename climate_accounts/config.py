"""Flask configuration."""

import os

#################### Durable user store ####################
DATABASE_URI = os.environ.get('DATABASE_URI', 'sqlite:///climate.db')
"""SQLAlchemy URI for the user database."""

DATABASE_TIMEOUT = os.environ.get('DATABASE_TIMEOUT', '5')
"""Seconds to wait for a connection from the pool before giving up."""

CREATE_DB = bool(int(os.environ.get('CREATE_DB', 0)))
"""Create tables and indexes on startup."""


#################### Session cache ####################
REDIS_URL = os.environ.get('REDIS_URL', None)
"""Full redis URL. If set, takes precedence over host and port."""

REDIS_HOST = os.environ.get('REDIS_HOST', 'localhost')
REDIS_PORT = os.environ.get('REDIS_PORT', '6379')
REDIS_DATABASE = os.environ.get('REDIS_DATABASE', '0')
REDIS_TOKEN = os.environ.get('REDIS_TOKEN', None)
"""This is the token used in the AUTH procedure."""

REDIS_TIMEOUT = os.environ.get('REDIS_TIMEOUT', '5')
"""Socket connect and operation timeout, in seconds."""

REDIS_FAKE = os.environ.get('REDIS_FAKE', False)
"""Use the FakeRedis library instead of a redis service.

Useful for testing, dev, beta."""

SESSION_DURATION = os.environ.get('SESSION_DURATION', str(60 * 60 * 24 * 90))
"""Lifetime of a cached session projection, in seconds. Defaults to 90 days."""


#################### Reconnection ####################
RECONNECT_MAX_ATTEMPTS = os.environ.get('RECONNECT_MAX_ATTEMPTS', '10')
"""Reconnection attempts before the supervisor gives up."""

RECONNECT_DELAY = os.environ.get('RECONNECT_DELAY', '1')
RECONNECT_MAX_DELAY = os.environ.get('RECONNECT_MAX_DELAY', '5')
"""Initial backoff and backoff cap between reconnection attempts, in seconds."""


#################### Passwords ####################
PASSWORD_MIN_LENGTH = os.environ.get('PASSWORD_MIN_LENGTH', '8')

PASSWORD_CHANGE_BODY_IDENTITY = bool(int(
    os.environ.get('PASSWORD_CHANGE_BODY_IDENTITY', '1')
))
"""Accept ``userId`` from the request body when no session token is sent.

This is a weak form of authentication kept for existing clients. Turn it
off to require a session token for password changes."""


#################### Logging ####################
LOGLEVEL = int(os.environ.get('LOGLEVEL', 20))
LOG_JSON = bool(int(os.environ.get('LOG_JSON', '1')))
"""Emit log records as JSON lines."""


#################### Flask configs ####################
APPLICATION_ROOT = os.environ.get('APPLICATION_ROOT', '/')

VERSION = '0.1.0'
"""The application version."""
