"""
Controllers for logging in.

When a user logs in they are issued a session token. The token is the key
of their cached session projection, and is mirrored on their user record.
Clients send it back on subsequent requests to identify the session.
"""

import logging

from wtforms import Form, PasswordField, StringField
from wtforms.validators import DataRequired

from .. import sessions
from ..errors import AuthError, InternalError, ValidationError
from ..services.exceptions import NoSuchUser, PasswordAuthenticationFailed, \
    SessionCreationFailed
from ..services.session_store import SessionCache
from ..services.users import UserStore
from .util import ResponseData, form_data

logger = logging.getLogger(__name__)


class LoginForm(Form):
    """Log in form."""

    email = StringField('Email address', validators=[DataRequired()])
    password = PasswordField('Password', validators=[DataRequired()])


def login(params: dict, users: UserStore,
          cache: SessionCache) -> ResponseData:
    """
    Log a user in.

    Parameters
    ----------
    params : dict
        Should include ``email`` and ``password``.
    users : :class:`.UserStore`
    cache : :class:`.SessionCache`

    Returns
    -------
    dict
        Includes the session ``token`` and the public ``user`` profile.
    int
        200 (OK) if all goes well.
    dict
        Headers to add to the response.

    """
    form = LoginForm(form_data(params))
    if not form.validate():
        logger.debug('Login data is not valid')
        raise ValidationError('Email and password are required.')

    try:
        result = sessions.login(users, cache, form.email.data,
                                form.password.data)
    except NoSuchUser as e:
        logger.debug('Login for unknown user')
        raise AuthError("User Doesn't Exist") from e
    except PasswordAuthenticationFailed as e:
        logger.debug('Login with bad password')
        raise AuthError('Invalid credentials') from e
    except SessionCreationFailed as e:
        logger.error('Could not create session: %s', e)
        raise InternalError('Cannot log in') from e

    data = {
        'message': 'Login successful',
        'success': True,
        'token': result.token,
        'sessionKey': result.token,
        'user': result.user
    }
    return data, 200, {}
