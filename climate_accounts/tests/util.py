"""Helpers for tests that need a real user store and session cache."""

from contextlib import contextmanager
from typing import Generator, Tuple

import fakeredis
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from climate_accounts.domain import UserRegistration
from climate_accounts.services.session_store import SessionCache
from climate_accounts.services.users import UserStore

NINETY_DAYS = 60 * 60 * 24 * 90


def make_user_store() -> UserStore:
    """A :class:`.UserStore` backed by a fresh in-memory SQLite database."""
    engine = create_engine('sqlite://',
                           connect_args={'check_same_thread': False},
                           poolclass=StaticPool)
    store = UserStore(engine)
    store.create_all()
    return store


def make_cache(duration: int = NINETY_DAYS) -> SessionCache:
    """A :class:`.SessionCache` backed by its own fake redis server."""
    r = fakeredis.FakeStrictRedis(server=fakeredis.FakeServer())
    return SessionCache(r, duration)


@contextmanager
def temporary_stores() -> Generator[Tuple[UserStore, SessionCache],
                                    None, None]:
    """Provide an empty user store and session cache."""
    users = make_user_store()
    cache = make_cache()
    try:
        yield users, cache
    finally:
        users.drop_all()
        users.close()
        cache.close()


def register_user(users: UserStore, email: str = 'Ada@Example.com',
                  password: str = 'correct horse', name: str = 'Ada',
                  phone: str = '111') -> str:
    """Register a user and return their identifier."""
    user = users.register(UserRegistration(name=name, email=email,
                                           phone=phone, password=password))
    return user.user_id
