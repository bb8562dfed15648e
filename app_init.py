"""
Application Initialization Module
Initializes the Flask app with configuration, logging, database, services and the API route table
"""
import os
from flask import Flask
from config import get_config, normalize_database_url
from logging_config import setup_logging
from database.connection import configure_database, init_db
from security import setup_security
from health_checks import register_health_checks
from services import (
    ArtistService, CustomerService, EventsService, FinanceService,
    InventoryService, StaffService
)
from app import register_blueprints
from app.api.routes import build_routes
import logging

logger = logging.getLogger(__name__)


def create_app(config_class=None):
    """
    Application factory that creates and configures Flask app with all infrastructure

    Args:
        config_class: Configuration class; selected from FLASK_ENV when omitted

    Returns:
        Configured Flask application instance
    """
    # Create Flask app
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config_class or get_config())

    setup_logging(app)

    logger.info("=" * 60)
    logger.info("🚀 Initializing ArtistHub API")
    logger.info("=" * 60)
    logger.info(f"Environment: {os.environ.get('FLASK_ENV', 'development')}")
    logger.info(f"Debug mode: {app.debug}")

    # Database
    session_factory = initialize_database(app)

    # Security headers; returns the CORS headers for the dispatcher
    app.api_headers = setup_security(app, app.config)

    # Entity services and the route table
    app.services = create_services(app, session_factory)
    app.api_routes = build_routes(app.services, app.api_headers, app.config.get('SERVICE_NAMES'))

    register_blueprints(app)

    # Register health check endpoints
    register_health_checks(app)

    logger.info("✅ Application initialization complete")
    logger.info("=" * 60)

    return app


def initialize_database(app):
    """
    Configure the engine and create tables

    Args:
        app: Flask application instance

    Returns:
        SQLAlchemy session factory
    """
    database_url = normalize_database_url(app.config['DATABASE_URL'])
    session_factory = configure_database(database_url, app.config.get('SQLALCHEMY_ENGINE_OPTIONS'))
    init_db()
    logger.info("✅ Database initialized")
    return session_factory


def create_services(app, session_factory):
    """
    Construct the entity services keyed by API collection name

    Args:
        app: Flask application instance
        session_factory: SQLAlchemy session factory shared by all services

    Returns:
        Dictionary of service instances
    """
    page_size = app.config.get('DEFAULT_PAGE_SIZE', 20)
    max_page_size = app.config.get('MAX_PAGE_SIZE', 100)

    def make(service_class):
        return service_class(session_factory, page_size=page_size, max_page_size=max_page_size)

    services = {
        'customers': make(CustomerService),
        'inventory': make(InventoryService),
        'finances': make(FinanceService),
        'staff': make(StaffService),
        'events': make(EventsService),
        'artists': make(ArtistService),
    }
    logger.info(f"✅ Services initialized: {', '.join(services)}")
    return services
