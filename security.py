"""
Security Utilities & Middleware
Cross-origin headers for the API dispatcher and hardening headers for every response
"""
from typing import Any, Dict
from flask import Flask, Response, request
import logging

from app.api.errors import MethodNotAllowedError, RouteNotFoundError
from app.api.responses import cors_headers, empty_response, error_response

logger = logging.getLogger(__name__)


def build_cors_headers(config: Dict[str, Any]) -> Dict[str, str]:
    """
    Cross-origin headers the dispatcher adds to every /api response

    Args:
        config: Application configuration dictionary

    Returns:
        Header name -> value
    """
    return cors_headers(
        origin=config.get('CORS_ORIGIN', '*'),
        allow_headers=config.get('CORS_ALLOW_HEADERS'),
        allow_methods=config.get('CORS_ALLOW_METHODS'),
    )


def setup_security_headers(app: Flask, cors: Dict[str, str]):
    """
    Add security and cross-origin headers to all responses

    Args:
        app: Flask application instance
        cors: Cross-origin headers (the dispatcher already sets them on /api responses)
    """
    @app.after_request
    def add_security_headers(response: Response) -> Response:
        """Add security headers to response"""

        # Prevent MIME type sniffing
        response.headers['X-Content-Type-Options'] = 'nosniff'

        # JSON API - never framed
        response.headers['X-Frame-Options'] = 'DENY'

        # Strict Transport Security (HTTPS only in production)
        if not app.debug:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'

        for name, value in cors.items():
            response.headers.setdefault(name, value)

        return response

    logger.info("Security headers configured")


def setup_error_handlers(app: Flask, cors: Dict[str, str]):
    """
    Answer preflights and Flask-level errors outside the dispatcher with the
    same empty 204 and JSON error envelope the /api dispatcher uses

    Args:
        app: Flask application instance
        cors: Cross-origin headers added to every response
    """
    @app.before_request
    def answer_preflight():
        """OPTIONS on any path, routed or not"""
        if request.method == 'OPTIONS':
            return empty_response(204, cors)

    @app.errorhandler(404)
    def not_found(error):
        """Handle 404 Not Found"""
        return error_response(RouteNotFoundError.status, RouteNotFoundError.detail, request.path, cors)

    @app.errorhandler(405)
    def method_not_allowed(error):
        """Handle 405 Method Not Allowed (including methods no route accepts)"""
        return error_response(MethodNotAllowedError.status, MethodNotAllowedError.detail, request.path, cors)

    @app.errorhandler(400)
    @app.errorhandler(413)
    def client_error(error):
        """Handle other client errors raised by Flask or werkzeug"""
        return error_response(error.code, error.description, request.path, cors)

    @app.errorhandler(500)
    def internal_server_error(error):
        """Handle 500 Internal Server Error"""
        logger.error(f"Internal server error: {error}", exc_info=True)
        return error_response(500, 'Internal server error', request.path, cors)

    logger.info("Error handlers registered")


def setup_security(app: Flask, config: Dict[str, Any]):
    """
    Setup all security features for the application

    Args:
        app: Flask application instance
        config: Application configuration dictionary

    Returns:
        CORS headers for the API dispatcher
    """
    logger.info("Configuring application security...")

    if config.get('CORS_ORIGIN') == '*' and not app.debug:
        logger.warning("⚠️  Using wildcard CORS origin in production! Set CORS_ORIGIN environment variable.")

    headers = build_cors_headers(config)
    setup_security_headers(app, headers)
    setup_error_handlers(app, headers)

    logger.info("✅ Security configuration complete")
    return headers
