"""Account registration."""

import logging

from wtforms import Form, PasswordField, StringField
from wtforms.validators import DataRequired, Length

from ..domain import UserRegistration
from ..errors import ConflictError, ValidationError
from ..services.exceptions import EmailAlreadyRegistered
from ..services.users import UserStore
from .util import ResponseData, form_data, is_missing

logger = logging.getLogger(__name__)


class RegistrationForm(Form):
    """Data required to create an account."""

    name = StringField('Name', validators=[DataRequired(), Length(max=255)])
    email = StringField('Email address',
                        validators=[DataRequired(), Length(max=255)])
    phone = StringField('Phone', validators=[DataRequired(), Length(max=64)])
    password = PasswordField('Password', validators=[DataRequired()])


def register(params: dict, users: UserStore) -> ResponseData:
    """
    Create a new account.

    Parameters
    ----------
    params : dict
        Should include ``name``, ``email``, ``phone`` and ``password``.
    users : :class:`.UserStore`

    Returns
    -------
    dict
        Response data.
    int
        201 (Created) if all goes well.
    dict
        Headers to add to the response.

    """
    form = RegistrationForm(form_data(params))
    if not form.validate():
        if is_missing(form):
            raise ValidationError('All fields are required.')
        raise ValidationError('Invalid registration data.',
                              {'fields': form.errors})

    registration = UserRegistration(
        name=form.name.data,
        email=form.email.data,
        phone=form.phone.data,
        password=form.password.data
    )
    try:
        user = users.register(registration)
    except EmailAlreadyRegistered as e:
        logger.debug('Registration conflict: %s', e)
        raise ConflictError('Email already registered.') from e
    logger.info('Registered new user %s', user.user_id)
    return {'success': True, 'message': 'Registration successful'}, 201, {}
