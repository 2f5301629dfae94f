"""Web Server Gateway Interface entry-point."""

import atexit
import os
from typing import Optional

from flask import Flask

from climate_accounts.factory import create_app, shutdown

__flask_app__: Optional[Flask] = None


def application(environ, start_response):
    """WSGI application factory."""
    global __flask_app__
    if __flask_app__ is None:
        for key, value in environ.items():
            if isinstance(value, str):
                os.environ[key] = value
        __flask_app__ = create_app()
        atexit.register(shutdown, __flask_app__)
    return __flask_app__(environ, start_response)
