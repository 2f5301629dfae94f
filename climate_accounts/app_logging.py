"""Process-wide logging setup."""

import logging

from pythonjsonlogger.json import JsonFormatter

_configured = False


def setup_logger(level: int = logging.INFO, json_format: bool = True) -> None:
    """Attach a single stream handler to the root logger."""
    global _configured
    logger = logging.getLogger()
    logger.setLevel(level)
    if _configured:
        return
    log_handler = logging.StreamHandler()
    if json_format:
        formatter: logging.Formatter = JsonFormatter(
            '%(asctime)s %(levelname)s %(name)s %(message)s',
            rename_fields={'levelname': 'level', 'asctime': 'timestamp'}
        )
    else:
        formatter = logging.Formatter(
            '%(asctime)s %(levelname)s %(name)s: %(message)s'
        )
    log_handler.setFormatter(formatter)
    logger.addHandler(log_handler)
    _configured = True
