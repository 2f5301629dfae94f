"""Session lookup and profile updates."""

from typing import Any, Optional
import logging

from wtforms import Form, StringField
from wtforms.validators import Length, optional

from .. import sessions
from ..errors import InternalError, NotFoundError, SessionExpiredError, \
    ValidationError
from ..services.exceptions import SessionUpdateFailed
from ..services.session_store import SessionCache
from ..services.users import UserStore
from .util import ResponseData, form_data

logger = logging.getLogger(__name__)


class ProfileForm(Form):
    """Mutable profile fields. Blank fields are left unchanged."""

    name = StringField('Name', validators=[optional(), Length(max=255)])
    phone = StringField('Phone', validators=[optional(), Length(max=64)])


def user_from_session(token: str, users: UserStore,
                      cache: SessionCache) -> ResponseData:
    """Get the current projection of the user holding a session."""
    try:
        user = sessions.resolve_session(users, cache, token)
    except sessions.SessionExpired as e:
        raise SessionExpiredError(str(e), e.reason) from e
    except SessionUpdateFailed as e:
        logger.error('Could not repair session %s: %s', token[:8], e)
        raise InternalError('Server error while fetching user.') from e
    return {'user': user}, 200, {}


def update_profile(params: Any, users: UserStore,
                   cache: SessionCache) -> ResponseData:
    """
    Update the name and/or phone of the user holding a session.

    Parameters
    ----------
    params : dict
        Should include the session ``token`` (``sessionKey`` is also
        accepted), and at least one of ``name`` and ``phone``.
    users : :class:`.UserStore`
    cache : :class:`.SessionCache`

    Returns
    -------
    dict
        Includes the updated ``user`` projection.
    int
        200 (OK) if all goes well.
    dict
        Headers to add to the response.

    """
    formdata = form_data(params)
    token: Optional[str] = formdata.get('token') or formdata.get('sessionKey')
    if not token:
        raise ValidationError('Session token is required.')
    form = ProfileForm(formdata)
    if not form.validate():
        raise ValidationError('Invalid profile data.', {'fields': form.errors})
    name = (form.name.data or '').strip() or None
    phone = (form.phone.data or '').strip() or None
    if name is None and phone is None:
        raise ValidationError('Nothing to update.')

    try:
        user = sessions.update_profile(users, cache, token, name=name,
                                       phone=phone)
    except sessions.UnknownSession as e:
        raise NotFoundError('Invalid session') from e
    except sessions.SessionExpired as e:
        raise SessionExpiredError(str(e), e.reason) from e
    except SessionUpdateFailed as e:
        raise InternalError('Profile saved, but the session could not be '
                            'refreshed.') from e
    data = {
        'message': 'Profile updated successfully',
        'success': True,
        'user': user
    }
    return data, 200, {}
