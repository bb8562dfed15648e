"""
API Responses - JSON responses, the error envelope and status mapping.

Every response leaving the dispatcher carries the cross-origin headers.
Successful handler results are passed through unchanged. Failed results are
re-rendered as the error envelope, keeping the service detail and any
field errors. The HTTP status comes from status_for().
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from werkzeug.wrappers import Response

API_ERROR_TYPE = 'https://docs.trainstation-dashboard.com/errors/api-error'
API_ERROR_TITLE = 'API Error'

# Operation kinds
LIST = 'list'
CREATE = 'create'
RETRIEVE = 'retrieve'
UPDATE = 'update'
DELETE = 'delete'

# operation -> (status on success, status on failure)
OPERATION_STATUS = {
    LIST: (200, 400),
    CREATE: (201, 400),
    RETRIEVE: (200, 404),
    UPDATE: (200, 400),
    DELETE: (200, 400),
}


def status_for(operation: str, success: bool) -> int:
    """HTTP status for the outcome of an operation."""
    ok, failed = OPERATION_STATUS[operation]
    return ok if success else failed


def cors_headers(origin: str = '*', allow_headers=None, allow_methods=None) -> Dict[str, str]:
    """Cross-origin headers sent on every API response."""
    return {
        'Access-Control-Allow-Origin': origin,
        'Access-Control-Allow-Headers': ', '.join(allow_headers or [
            'authorization', 'x-client-info', 'apikey', 'content-type',
            'x-request-id', 'x-api-version',
        ]),
        'Access-Control-Allow-Methods': ', '.join(allow_methods or [
            'GET', 'POST', 'PUT', 'DELETE', 'PATCH', 'OPTIONS',
        ]),
    }


def json_response(body: Any, status: int = 200, headers: Optional[Dict[str, str]] = None) -> Response:
    response = Response(json.dumps(body), status=status, mimetype='application/json')
    for name, value in (headers or {}).items():
        response.headers[name] = value
    return response


def empty_response(status: int = 204, headers: Optional[Dict[str, str]] = None) -> Response:
    response = Response(status=status)
    for name, value in (headers or {}).items():
        response.headers[name] = value
    return response


def error_body(status: int, detail: str, instance: str) -> Dict[str, Any]:
    return {
        'error': {
            'type': API_ERROR_TYPE,
            'title': API_ERROR_TITLE,
            'status': status,
            'detail': detail,
            'instance': instance,
            'timestamp': datetime.now(timezone.utc).isoformat(),
        }
    }


def error_response(status: int, detail: str, instance: str,
                   headers: Optional[Dict[str, str]] = None) -> Response:
    """Error envelope response; instance is the request path."""
    return json_response(error_body(status, detail, instance), status, headers)


def failure_body(result: Dict[str, Any], status: int, instance: str) -> Dict[str, Any]:
    """Error envelope for a failed service result."""
    service_error = result.get('error') or {}
    body = error_body(status, service_error.get('detail') or 'Request failed', instance)
    if service_error.get('errors'):
        body['error']['errors'] = service_error['errors']
    return body


def result_response(result: Dict[str, Any], operation: str, instance: str,
                    headers: Optional[Dict[str, str]] = None) -> Response:
    """Respond with a service result, using the status its success flag implies."""
    status = status_for(operation, bool(result.get('success')))
    if result.get('success'):
        return json_response(result, status, headers)
    return json_response(failure_body(result, status, instance), status, headers)
