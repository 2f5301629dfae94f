"""Application factory for the accounts service."""

from typing import Any, Mapping, Optional
import logging

from flask import Flask, Response, jsonify
from werkzeug.exceptions import HTTPException

from . import routes
from .app_logging import setup_logger
from .errors import InternalError
from .services import session_store, users
from .services.session_store import SessionCache
from .services.users import UserStore

logger = logging.getLogger(__name__)


def jsonify_exception(error: HTTPException) -> Response:
    """Render an HTTP error as a JSON body."""
    exc_resp = error.get_response()
    body = {'error': error.description}
    body.update(getattr(error, 'payload', {}))
    response: Response = jsonify(body)
    response.status_code = exc_resp.status_code
    return response


def handle_unexpected(error: Exception) -> Response:
    """Anything not already an HTTP error is a 500."""
    if isinstance(error, HTTPException):
        return jsonify_exception(error)
    logger.exception('Unhandled exception: %s', error)
    return jsonify_exception(InternalError('Internal server error'))


def create_app(config: Optional[Mapping[str, Any]] = None,
               user_store: Optional[UserStore] = None,
               cache: Optional[SessionCache] = None) -> Flask:
    """
    Initialize and configure the accounts application.

    Parameters
    ----------
    config : mapping
        Overrides applied after ``config.py``.
    user_store : :class:`.UserStore`
    cache : :class:`.SessionCache`
        Handles to use instead of building them from configuration.

    """
    app = Flask('climate_accounts')
    app.config.from_pyfile('config.py')
    if config:
        app.config.update(config)

    setup_logger(int(app.config['LOGLEVEL']), bool(app.config['LOG_JSON']))

    users.init_app(app, user_store)
    session_store.init_app(app, cache)

    app.register_blueprint(routes.blueprint)
    app.register_error_handler(HTTPException, jsonify_exception)
    app.register_error_handler(Exception, handle_unexpected)

    if app.config['CREATE_DB']:
        users.current_store(app).create_all()
    return app


def shutdown(app: Flask) -> None:
    """Release the store and cache connections held by ``app``."""
    if users.EXTENSION in app.extensions:
        app.extensions.pop(users.EXTENSION).close()
    if session_store.EXTENSION in app.extensions:
        app.extensions.pop(session_store.EXTENSION).close()
