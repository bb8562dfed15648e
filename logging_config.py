"""
Logging for the ArtistHub API

Console output always; a rotating log file unless LOG_TO_FILE is off; and one
access line per API request (method, path, status, duration) on the
``artisthub.access`` logger.
"""
import logging
import logging.handlers
import time
from pathlib import Path

from flask import g, request

ACCESS_LOGGER = 'artisthub.access'

# Libraries that are chatty at INFO
QUIET_LOGGERS = ('werkzeug', 'sqlalchemy.engine', 'sqlalchemy.pool')


def _file_handler(app, formatter, level):
    log_dir = Path(app.config.get('LOG_DIR', 'logs'))
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        log_dir / app.config['LOG_FILE'],
        maxBytes=10 * 1024 * 1024,  # 10MB
        backupCount=5
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(app):
    """
    Configure the root logger from LOG_LEVEL / LOG_FORMAT / LOG_FILE and hook
    the per-request access log into the app.

    Args:
        app: Flask application instance

    Returns:
        The root logger
    """
    level = getattr(logging, app.config['LOG_LEVEL'].upper(), logging.INFO)
    formatter = logging.Formatter(app.config['LOG_FORMAT'])

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers = []

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    root_logger.addHandler(console)

    if app.config.get('LOG_TO_FILE', True):
        file_handler = _file_handler(app, formatter, level)
        root_logger.addHandler(file_handler)
        app.logger.info(f"Log file: {file_handler.baseFilename}")

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if app.config.get('LOG_REQUESTS', True):
        setup_access_log(app)

    app.logger.info(f"Logging initialized at {logging.getLevelName(level)} level")
    return root_logger


def setup_access_log(app):
    """Log every /api request once it has produced a response."""
    access_logger = logging.getLogger(ACCESS_LOGGER)

    @app.before_request
    def start_timer():
        g.request_started = time.perf_counter()

    @app.after_request
    def log_request(response):
        if not request.path.startswith('/api'):
            return response
        started = g.pop('request_started', None)
        elapsed_ms = (time.perf_counter() - started) * 1000 if started is not None else 0.0
        # Server errors are already logged with a traceback by the dispatcher
        log = access_logger.warning if response.status_code >= 500 else access_logger.info
        log("%s %s -> %s (%.1f ms)", request.method, request.path, response.status_code, elapsed_ms)
        return response
