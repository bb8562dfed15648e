"""
Tests for configuration system
"""
import os
import pytest
from config import (
    Config,
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    get_config,
    normalize_database_url
)


@pytest.mark.unit
class TestBaseConfig:
    """Tests for base configuration"""

    def test_base_config_has_secret_key(self):
        """Test that base config has a secret key"""
        config = Config()
        assert hasattr(config, 'SECRET_KEY')
        assert config.SECRET_KEY is not None

    def test_base_config_has_max_content_length(self):
        """Test that base config has max content length"""
        config = Config()
        assert config.MAX_CONTENT_LENGTH == 5 * 1024 * 1024

    def test_base_config_has_cors_settings(self):
        """Test that base config has CORS settings"""
        config = Config()
        assert config.CORS_ORIGIN == '*'
        assert 'x-api-version' in config.CORS_ALLOW_HEADERS
        assert config.CORS_ALLOW_METHODS == ['GET', 'POST', 'PUT', 'DELETE', 'PATCH', 'OPTIONS']

    def test_base_config_has_service_names(self):
        """Test that the six API services are listed"""
        config = Config()
        assert config.SERVICE_NAMES == ['customers', 'inventory', 'finances', 'staff', 'events', 'artists']

    def test_base_config_has_paging_settings(self):
        """Test that base config has paging limits"""
        config = Config()
        assert config.DEFAULT_PAGE_SIZE == 20
        assert config.MAX_PAGE_SIZE == 100

    def test_base_config_has_logging_settings(self):
        """Test that base config has logging settings"""
        config = Config()
        assert config.LOG_LEVEL == 'INFO'
        assert config.LOG_FILE == 'artisthub.log'


@pytest.mark.unit
class TestDatabaseUrl:
    """Tests for database URL normalization"""

    def test_postgres_scheme_normalized(self):
        assert normalize_database_url('postgres://u:p@host/db') == 'postgresql://u:p@host/db'

    def test_other_urls_unchanged(self):
        assert normalize_database_url('sqlite:///artisthub.db') == 'sqlite:///artisthub.db'
        assert normalize_database_url(None) is None


@pytest.mark.unit
class TestDevelopmentConfig:
    """Tests for development configuration"""

    def test_development_config_has_debug(self):
        """Test that development config has debug enabled"""
        config = DevelopmentConfig()
        assert config.DEBUG is True

    def test_development_config_has_testing_disabled(self):
        """Test that development config has testing disabled"""
        config = DevelopmentConfig()
        assert config.TESTING is False

    def test_development_config_has_debug_log_level(self):
        """Test that development config has DEBUG log level"""
        config = DevelopmentConfig()
        assert config.LOG_LEVEL == 'DEBUG'


@pytest.mark.unit
class TestProductionConfig:
    """Tests for production configuration"""

    def test_production_config_has_debug_disabled(self):
        """Test that production config has debug disabled"""
        config = ProductionConfig()
        assert config.DEBUG is False

    def test_production_config_has_testing_disabled(self):
        """Test that production config has testing disabled"""
        config = ProductionConfig()
        assert config.TESTING is False

    def test_production_config_locks_cors_origin(self):
        """Test that production config does not default to a wildcard origin"""
        config = ProductionConfig()
        assert config.CORS_ORIGIN != '*'

    def test_production_config_has_pool_settings(self):
        """Test that production config enables connection pooling"""
        config = ProductionConfig()
        assert config.SQLALCHEMY_ENGINE_OPTIONS['pool_pre_ping'] is True


@pytest.mark.unit
class TestTestingConfig:
    """Tests for testing configuration"""

    def test_testing_config_has_debug(self):
        """Test that testing config has debug enabled"""
        config = TestingConfig()
        assert config.DEBUG is True

    def test_testing_config_has_testing_enabled(self):
        """Test that testing config has testing enabled"""
        config = TestingConfig()
        assert config.TESTING is True

    def test_testing_config_uses_in_memory_database(self):
        """Test that testing config uses in-memory SQLite"""
        config = TestingConfig()
        assert config.DATABASE_URL == 'sqlite://'

    def test_testing_config_disables_log_file(self):
        """Test that testing config logs to the console only"""
        config = TestingConfig()
        assert config.LOG_TO_FILE is False


@pytest.mark.unit
class TestGetConfig:
    """Tests for configuration selector"""

    def test_get_config_returns_development_by_default(self):
        """Test that get_config returns development config by default"""
        # Clear environment
        old_env = os.environ.get('FLASK_ENV')
        if 'FLASK_ENV' in os.environ:
            del os.environ['FLASK_ENV']

        config_class = get_config()
        assert config_class == DevelopmentConfig

        # Restore environment
        if old_env:
            os.environ['FLASK_ENV'] = old_env

    def test_get_config_returns_production_when_set(self):
        """Test that get_config returns production config when env is production"""
        old_env = os.environ.get('FLASK_ENV')
        os.environ['FLASK_ENV'] = 'production'

        config_class = get_config()
        assert config_class == ProductionConfig

        # Restore environment
        if old_env:
            os.environ['FLASK_ENV'] = old_env
        else:
            del os.environ['FLASK_ENV']

    def test_get_config_returns_testing_when_set(self):
        """Test that get_config returns testing config when env is testing"""
        old_env = os.environ.get('FLASK_ENV')
        os.environ['FLASK_ENV'] = 'testing'

        config_class = get_config()
        assert config_class == TestingConfig

        # Restore environment
        if old_env:
            os.environ['FLASK_ENV'] = old_env
        else:
            del os.environ['FLASK_ENV']
