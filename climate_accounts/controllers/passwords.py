"""
Password changes.

The acting user is normally identified by a session token sent as
``Authorization: Bearer <token>``. Older clients send only ``userId`` in
the request body; that is accepted only while
``PASSWORD_CHANGE_BODY_IDENTITY`` is enabled.
"""

from typing import Any, Optional
import logging

from wtforms import Form, PasswordField, StringField
from wtforms.validators import DataRequired

from .. import sessions
from ..errors import AuthError, NotFoundError, SessionExpiredError, \
    ValidationError
from ..services.exceptions import NoSuchUser, PasswordAuthenticationFailed
from ..services.session_store import SessionCache
from ..services.users import UserStore
from .util import ResponseData, form_data

logger = logging.getLogger(__name__)


class PasswordChangeForm(Form):
    """Password change form."""

    userId = StringField('User ID')
    currentPassword = PasswordField('Current password',
                                    validators=[DataRequired()])
    newPassword = PasswordField('New password', validators=[DataRequired()])


def change_password(params: Any, token: Optional[str], users: UserStore,
                    cache: SessionCache, min_length: int = 8,
                    body_identity: bool = True) -> ResponseData:
    """
    Change the password of the acting user.

    Parameters
    ----------
    params : dict
        Should include ``currentPassword`` and ``newPassword``; may include
        ``userId``.
    token : str or None
        Session token from the ``Authorization`` header.
    users : :class:`.UserStore`
    cache : :class:`.SessionCache`
    min_length : int
        Minimum length of the new password.
    body_identity : bool
        Whether ``userId`` may stand in for a session token.

    Returns
    -------
    dict
        Response data.
    int
        200 (OK) if all goes well.
    dict
        Headers to add to the response.

    """
    form = PasswordChangeForm(form_data(params))
    if not form.validate():
        raise ValidationError('Current and new passwords are required.')
    current_password = form.currentPassword.data
    new_password = form.newPassword.data
    if len(new_password) < min_length:
        raise ValidationError(
            f'New password must be at least {min_length} characters long.'
        )
    if new_password == current_password:
        raise ValidationError('New password must differ from the current '
                              'password.')

    user_id = _acting_user(token, (form.userId.data or '').strip() or None,
                           users, cache, body_identity)
    try:
        users.change_password(user_id, current_password, new_password)
    except NoSuchUser as e:
        raise NotFoundError('User not found') from e
    except PasswordAuthenticationFailed as e:
        raise AuthError('Current password is incorrect', code=401) from e
    logger.info('Changed password for %s', user_id)
    return {'success': True, 'message': 'Password updated successfully'}, \
        200, {}


def _acting_user(token: Optional[str], body_user_id: Optional[str],
                 users: UserStore, cache: SessionCache,
                 body_identity: bool) -> str:
    if token:
        try:
            user = sessions.resolve_session(users, cache, token)
        except sessions.SessionExpired as e:
            raise SessionExpiredError(str(e), e.reason) from e
        session_user_id: str = user['userid']
        if body_user_id and body_user_id != session_user_id:
            logger.warning('userId in body does not match session %s',
                           token[:8])
            raise AuthError('userId does not match the session', code=401)
        return session_user_id
    if body_identity and body_user_id:
        logger.debug('Password change identified by body userId')
        return body_user_id
    raise AuthError('Authentication required', code=401)
