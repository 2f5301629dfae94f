"""
Integration with the durable user store.

The user store is the source of truth for identity and profile data. Each
:class:`.UserStore` owns a SQLAlchemy :class:`.Engine` and a
:class:`.ConnectionSupervisor`; one instance is shared by every request in
the process (see :func:`current_store`).
"""

from typing import Generator, Optional
from contextlib import contextmanager
from datetime import datetime
import logging
import threading
import uuid

from flask import Flask, current_app
from pytz import UTC
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, OperationalError, \
    TimeoutError as PoolTimeout
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session

from ...domain import User, UserRegistration, as_utc
from ..connection import ConnectionSupervisor
from ..exceptions import EmailAlreadyRegistered, NoSuchUser, \
    PasswordAuthenticationFailed, StoreUnavailable
from .models import Base, DBUser
from .passwords import check_password, hash_password

logger = logging.getLogger(__name__)

EXTENSION = 'climate_accounts.users'
_init_lock = threading.Lock()


def normalize_email(email: str) -> str:
    """E-mail addresses are compared case-insensitively."""
    return email.strip().lower()


class UserStore(object):
    """Reads and writes user records."""

    def __init__(self, engine: Engine,
                 supervisor: Optional[ConnectionSupervisor] = None) -> None:
        self.engine = engine
        self._sessionmaker = sessionmaker(bind=engine, expire_on_commit=False)
        self.supervisor = supervisor or ConnectionSupervisor('store',
                                                             self._ping)

    @contextmanager
    def transaction(self) -> Generator[Session, None, None]:
        """Context manager for database transaction."""
        session = self._sessionmaker()
        try:
            yield session
            session.commit()
        except (IntegrityError, NoSuchUser, PasswordAuthenticationFailed):
            session.rollback()
            raise
        except (OperationalError, PoolTimeout) as e:
            logger.error('Commit failed, rolling back: %s', str(e))
            session.rollback()
            self.supervisor.mark_down(e)
            raise StoreUnavailable('User database is unavailable') from e
        except Exception as e:
            logger.error('Commit failed, rolling back: %s', str(e))
            session.rollback()
            raise
        else:
            self.supervisor.mark_up()
        finally:
            session.close()

    def register(self, registration: UserRegistration) -> User:
        """
        Add a new user to the database.

        Parameters
        ----------
        registration : :class:`.UserRegistration`

        Returns
        -------
        :class:`.User`

        Raises
        ------
        :class:`.EmailAlreadyRegistered`
            If a user with the same (case-insensitive) e-mail exists.

        """
        email = normalize_email(registration.email)
        if self.does_email_exist(email):
            raise EmailAlreadyRegistered(f'{email} is already registered')
        db_user = DBUser(
            user_id=str(uuid.uuid4()),
            name=registration.name,
            email=email,
            phone=registration.phone,
            password=hash_password(registration.password),
            reset_token_used=False,
            reset_token_time=None,
            created_at=datetime.now(tz=UTC)
        )
        try:
            with self.transaction() as session:
                session.add(db_user)
        except IntegrityError as e:
            if self.does_email_exist(email):
                raise EmailAlreadyRegistered(
                    f'{email} is already registered'
                ) from e
            raise
        logger.debug('Registered user %s', db_user.user_id)
        return _to_domain(db_user)

    def does_email_exist(self, email: str) -> bool:
        """Determine whether a user with a particular address exists."""
        with self.transaction() as session:
            data = session.query(DBUser.id) \
                .filter(DBUser.email == normalize_email(email)) \
                .first()
        return data is not None

    def authenticate(self, email: str, password: str) -> User:
        """
        Validate e-mail/password. If successful, retrieve user details.

        Raises
        ------
        :class:`.NoSuchUser`
        :class:`.PasswordAuthenticationFailed`

        """
        with self.transaction() as session:
            db_user = session.query(DBUser) \
                .filter(DBUser.email == normalize_email(email)) \
                .first()
            if db_user is None:
                raise NoSuchUser('User does not exist')
            check_password(password, db_user.password)
            return _to_domain(db_user)

    def get_user_by_id(self, user_id: str) -> User:
        """Load a user by identifier; raises :class:`.NoSuchUser`."""
        with self.transaction() as session:
            db_user = session.query(DBUser) \
                .filter(DBUser.user_id == user_id) \
                .first()
            if db_user is None:
                raise NoSuchUser('User does not exist')
            return _to_domain(db_user)

    def get_user_by_session_key(self, session_key: str) -> Optional[User]:
        """Load the user whose session pointer equals ``session_key``."""
        with self.transaction() as session:
            db_user = session.query(DBUser) \
                .filter(DBUser.session_key == session_key) \
                .first()
            return _to_domain(db_user) if db_user is not None else None

    def set_session_key(self, user_id: str, session_key: str) -> None:
        """Point a user record at a new session token."""
        with self.transaction() as session:
            session.query(DBUser) \
                .filter(DBUser.user_id == user_id) \
                .update({DBUser.session_key: session_key},
                        synchronize_session=False)

    def clear_session_key(self, session_key: str) -> int:
        """
        Clear the session pointer on any record that holds ``session_key``.

        Returns
        -------
        int
            Number of records updated; zero if the token was already
            rotated away or never belonged to anyone.

        """
        with self.transaction() as session:
            count: int = session.query(DBUser) \
                .filter(DBUser.session_key == session_key) \
                .update({DBUser.session_key: None},
                        synchronize_session=False)
        return count

    def update_profile(self, session_key: str, name: Optional[str] = None,
                       phone: Optional[str] = None) -> Optional[User]:
        """
        Update the mutable profile fields of the user holding a session.

        Only ``name`` and ``phone`` can be changed. Fields passed as ``None``
        are left alone.

        Returns
        -------
        :class:`.User` or None
            The record as re-read after the write, or ``None`` if no record
            holds ``session_key``.

        """
        changes = {}
        if name is not None:
            changes[DBUser.name] = name
        if phone is not None:
            changes[DBUser.phone] = phone
        with self.transaction() as session:
            if changes:
                session.query(DBUser) \
                    .filter(DBUser.session_key == session_key) \
                    .update(changes, synchronize_session=False)
        return self.get_user_by_session_key(session_key)

    def change_password(self, user_id: str, current_password: str,
                        new_password: str) -> None:
        """
        Replace a user's password verifier.

        Raises
        ------
        :class:`.NoSuchUser`
        :class:`.PasswordAuthenticationFailed`
            If ``current_password`` is not correct.

        """
        with self.transaction() as session:
            db_user = session.query(DBUser) \
                .filter(DBUser.user_id == user_id) \
                .first()
            if db_user is None:
                raise NoSuchUser('User does not exist')
            check_password(current_password, db_user.password)
            db_user.password = hash_password(new_password)

    def create_all(self) -> None:
        """Create all tables in the database."""
        Base.metadata.create_all(self.engine)

    def drop_all(self) -> None:
        """Drop all tables in the database."""
        Base.metadata.drop_all(self.engine)

    def close(self) -> None:
        self.engine.dispose()

    def _ping(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(text('SELECT 1'))


def _to_domain(db_user: DBUser) -> User:
    return User(
        user_id=db_user.user_id,
        email=db_user.email,
        name=db_user.name,
        phone=db_user.phone,
        created_at=as_utc(db_user.created_at),
        session_key=db_user.session_key,
        reset_token_used=bool(db_user.reset_token_used),
        reset_token_time=as_utc(db_user.reset_token_time)
    )


def init_app(app: Flask, store: Optional[UserStore] = None) -> None:
    """Set default configuration parameters for an application instance."""
    app.config.setdefault('DATABASE_URI', 'sqlite:///climate.db')
    app.config.setdefault('DATABASE_TIMEOUT', '5')
    app.config.setdefault('RECONNECT_MAX_ATTEMPTS', '10')
    app.config.setdefault('RECONNECT_DELAY', '1')
    app.config.setdefault('RECONNECT_MAX_DELAY', '5')
    if store is not None:
        app.extensions[EXTENSION] = store


def get_user_store(app: Flask) -> UserStore:
    """Get a new :class:`.UserStore` for the configured database."""
    config = app.config
    uri = config['DATABASE_URI']
    timeout = float(config.get('DATABASE_TIMEOUT', '5'))
    if uri.startswith('sqlite'):
        engine = create_engine(uri, connect_args={'timeout': timeout,
                                                  'check_same_thread': False})
    else:
        # ``connect_timeout`` is understood by the MySQL and Postgres drivers.
        connect_timeout = max(1, int(timeout))
        engine = create_engine(uri, pool_pre_ping=True, pool_timeout=timeout,
                               connect_args={'connect_timeout':
                                             connect_timeout})
    store = UserStore(engine)
    store.supervisor = ConnectionSupervisor(
        'store', store._ping,
        max_attempts=int(config.get('RECONNECT_MAX_ATTEMPTS', '10')),
        delay=float(config.get('RECONNECT_DELAY', '1')),
        max_delay=float(config.get('RECONNECT_MAX_DELAY', '5'))
    )
    return store


def current_store(app: Optional[Flask] = None) -> UserStore:
    """Get/create the process-wide :class:`.UserStore`."""
    app = app or current_app._get_current_object()     # type: ignore
    with _init_lock:
        if EXTENSION not in app.extensions:
            app.extensions[EXTENSION] = get_user_store(app)
    store: UserStore = app.extensions[EXTENSION]
    return store
