"""Provides the JSON API of the accounts service."""

from typing import Any

from flask import Blueprint, Response, current_app, jsonify, request

from .controllers import authentication, passwords, profile, registration, \
    status
from .controllers.util import ResponseData, bearer_token
from .services.session_store import current_cache
from .services.users import current_store

blueprint = Blueprint('accounts', __name__, url_prefix='')


def _body() -> Any:
    return request.get_json(silent=True) or {}


def _respond(result: ResponseData) -> Response:
    data, code, headers = result
    response: Response = jsonify(data)
    response.status_code = code
    response.headers.extend(headers)
    return response


@blueprint.route('/register', methods=['POST'])
def register() -> Response:
    """Create an account."""
    return _respond(registration.register(_body(), current_store()))


@blueprint.route('/login', methods=['POST'])
def login() -> Response:
    """Log in and get a session token."""
    return _respond(authentication.login(_body(), current_store(),
                                         current_cache()))


@blueprint.route('/userfromsession/<string:token>', methods=['GET'])
def user_from_session(token: str) -> Response:
    """Get the current user projection for a session token."""
    return _respond(profile.user_from_session(token, current_store(),
                                              current_cache()))


@blueprint.route('/updateprofile', methods=['PUT'])
def update_profile() -> Response:
    """Update the profile of the user holding a session."""
    return _respond(profile.update_profile(_body(), current_store(),
                                           current_cache()))


@blueprint.route('/password/change', methods=['POST'])
def change_password() -> Response:
    """Change the password of the acting user."""
    token = bearer_token(request.headers.get('Authorization'))
    return _respond(passwords.change_password(
        _body(), token, current_store(), current_cache(),
        min_length=int(current_app.config['PASSWORD_MIN_LENGTH']),
        body_identity=current_app.config['PASSWORD_CHANGE_BODY_IDENTITY']
    ))


@blueprint.route('/status', methods=['GET'])
def service_status() -> Response:
    """Report whether the user store and session cache are reachable."""
    return _respond(status.service_status(current_store(), current_cache()))
