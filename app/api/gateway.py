"""
API Gateway Blueprint

Forwards every /api request, whatever its method, to the route dispatcher.
The route table and cross-origin headers are attached to the app by the
application factory (app.api_routes, app.api_headers).
"""

import logging
from flask import Blueprint, current_app, request

from app.api.router import dispatch

logger = logging.getLogger(__name__)

# Create blueprint
gateway_bp = Blueprint('gateway_bp', __name__)

ALL_METHODS = ['GET', 'POST', 'PUT', 'DELETE', 'PATCH', 'OPTIONS']


@gateway_bp.route('/api', defaults={'path': ''}, methods=ALL_METHODS, strict_slashes=False)
@gateway_bp.route('/api/<path:path>', methods=ALL_METHODS)
def api_gateway(path):
    """Hand the request to the dispatcher"""
    return dispatch(current_app.api_routes, request, current_app.api_headers)
