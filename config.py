"""
Centralized Configuration for the ArtistHub API
Manages environment-specific settings, database and CORS configuration.
"""
import os


def normalize_database_url(url):
    """Accept Heroku/Render style postgres:// URLs as postgresql://"""
    if url and url.startswith('postgres://'):
        return url.replace('postgres://', 'postgresql://', 1)
    return url


class Config:
    """Base configuration with defaults"""

    # Flask Settings
    SECRET_KEY = os.environ.get('SECRET_KEY') or os.urandom(32).hex()
    MAX_CONTENT_LENGTH = 5 * 1024 * 1024  # 5MB JSON bodies

    # CORS Settings (sent by the API dispatcher on every response)
    CORS_ORIGIN = os.environ.get('CORS_ORIGIN', '*')
    CORS_ALLOW_HEADERS = [
        'authorization', 'x-client-info', 'apikey', 'content-type',
        'x-request-id', 'x-api-version',
    ]
    CORS_ALLOW_METHODS = ['GET', 'POST', 'PUT', 'DELETE', 'PATCH', 'OPTIONS']

    # Database Settings
    DATABASE_URL = normalize_database_url(
        os.environ.get('DATABASE_URL', 'sqlite:///artisthub.db')
    )
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_recycle': 300,
    }

    # API Settings
    SERVICE_NAMES = ['customers', 'inventory', 'finances', 'staff', 'events', 'artists']
    DEFAULT_PAGE_SIZE = int(os.environ.get('DEFAULT_PAGE_SIZE', '20'))
    MAX_PAGE_SIZE = 100

    # Logging Configuration
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    LOG_FILE = os.environ.get('LOG_FILE', 'artisthub.log')
    LOG_TO_FILE = True
    LOG_DIR = os.environ.get('LOG_DIR', 'logs')
    LOG_REQUESTS = True


class DevelopmentConfig(Config):
    """Development-specific configuration"""
    DEBUG = True
    TESTING = False
    LOG_LEVEL = 'DEBUG'


class ProductionConfig(Config):
    """Production-specific configuration"""
    DEBUG = False
    TESTING = False
    # Lock the browser origin down in production
    CORS_ORIGIN = os.environ.get('CORS_ORIGIN', 'https://trainstation-dashboard.com')
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_recycle': 300,
        'pool_size': 5,
        'max_overflow': 10,
    }


class TestingConfig(Config):
    """Testing-specific configuration"""
    DEBUG = True
    TESTING = True
    DATABASE_URL = 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    LOG_TO_FILE = False


# Configuration selector
config_by_name = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig,
}


def get_config():
    """Get configuration based on FLASK_ENV environment variable"""
    env = os.environ.get('FLASK_ENV', 'development')
    return config_by_name.get(env, DevelopmentConfig)
