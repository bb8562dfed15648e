"""
Tests for logging setup and the API access log
"""
import logging
import logging.handlers

import pytest
from flask import Flask

from config import TestingConfig
from logging_config import ACCESS_LOGGER, setup_logging


@pytest.mark.unit
class TestSetupLogging:
    """Tests for handler configuration"""

    def test_console_only_when_file_logging_disabled(self):
        app = Flask(__name__)
        app.config.from_object(TestingConfig)
        root = setup_logging(app)
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0], logging.StreamHandler)

    def test_rotating_file_handler(self, tmp_path):
        app = Flask(__name__)
        app.config.from_object(TestingConfig)
        app.config.update(LOG_TO_FILE=True, LOG_DIR=str(tmp_path / 'logs'), LOG_FILE='api.log')
        root = setup_logging(app)
        file_handlers = [h for h in root.handlers if isinstance(h, logging.handlers.RotatingFileHandler)]
        assert len(file_handlers) == 1
        assert file_handlers[0].baseFilename.endswith('api.log')
        assert (tmp_path / 'logs').is_dir()
        file_handlers[0].close()

    def test_noisy_libraries_quieted(self):
        app = Flask(__name__)
        app.config.from_object(TestingConfig)
        setup_logging(app)
        assert logging.getLogger('werkzeug').level == logging.WARNING
        assert logging.getLogger('sqlalchemy.engine').level == logging.WARNING


@pytest.mark.integration
class TestAccessLog:
    """Tests for the per-request access line"""

    def test_api_request_logged(self, client, caplog):
        with caplog.at_level(logging.INFO, logger=ACCESS_LOGGER):
            client.get('/api/customers')
        lines = [r.getMessage() for r in caplog.records if r.name == ACCESS_LOGGER]
        assert len(lines) == 1
        assert lines[0].startswith('GET /api/customers -> 200')
        assert lines[0].endswith('ms)')

    def test_not_found_logged_with_status(self, client, caplog):
        with caplog.at_level(logging.INFO, logger=ACCESS_LOGGER):
            client.get('/api/unknown')
        lines = [r.getMessage() for r in caplog.records if r.name == ACCESS_LOGGER]
        assert lines[0].startswith('GET /api/unknown -> 404')

    def test_operational_endpoints_not_logged(self, client, caplog):
        with caplog.at_level(logging.INFO, logger=ACCESS_LOGGER):
            client.get('/ping')
        assert not [r for r in caplog.records if r.name == ACCESS_LOGGER]
