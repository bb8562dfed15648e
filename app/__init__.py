"""
ArtistHub API - Application Package

This package contains the HTTP layer:
- api/: route table, dispatcher and the Flask gateway blueprint

Entity services live in services/ and the models in database/.
The app factory and core Flask setup remain in app_init.py at the project root.
"""

import logging

from app.api.gateway import gateway_bp

logger = logging.getLogger(__name__)


def register_blueprints(app):
    """
    Register the API blueprints with the Flask app.

    Args:
        app: Flask application instance with api_routes and api_headers set
    """
    if not hasattr(app, 'api_routes'):
        raise RuntimeError("Route table must be attached to the app before registering the gateway")

    app.register_blueprint(gateway_bp)
    logger.info(f"API gateway registered ({len(app.api_routes)} routes)")


__all__ = ['register_blueprints', 'gateway_bp']
