"""
API Router - ordered route table and the dispatch function.

Routes are matched in registration order and the first match wins; there is
no specificity ranking, so literal sub-paths must be registered before a
parameterized route that would also match them.
"""

import logging
import re
from typing import Callable, Dict, List, Optional, Tuple

from werkzeug.exceptions import HTTPException
from werkzeug.routing import Map, Rule

from app.api.errors import ApiError, RouteNotFoundError
from app.api.request_context import RequestContext
from app.api.responses import empty_response, error_response

logger = logging.getLogger(__name__)

_PARAM = re.compile(r':([A-Za-z_][A-Za-z0-9_]*)')


class Route:
    """A path pattern such as ``/api/customers/:id`` bound to a handler."""

    def __init__(self, pattern: str, handler: Callable):
        self.pattern = pattern
        self.handler = handler
        self._adapter = Map([Rule(_PARAM.sub(r'<\1>', pattern))]).bind('localhost')

    def match(self, path: str) -> Optional[Dict[str, str]]:
        """Path parameters when the path matches, otherwise None."""
        try:
            _, params = self._adapter.match(path)
        except HTTPException:
            # NotFound, or a redirect to a normalized path
            return None
        return params

    def __repr__(self):
        return f"<Route {self.pattern}>"


class RouteTable:

    def __init__(self):
        self.routes: List[Route] = []

    def register(self, pattern: str, handler: Callable) -> 'RouteTable':
        self.routes.append(Route(pattern, handler))
        return self

    def route(self, pattern: str):
        """Decorator form of register()."""
        def decorator(handler):
            self.register(pattern, handler)
            return handler
        return decorator

    def match(self, path: str) -> Optional[Tuple[Route, Dict[str, str]]]:
        for route in self.routes:
            params = route.match(path)
            if params is not None:
                return route, params
        return None

    def __len__(self):
        return len(self.routes)

    def __iter__(self):
        return iter(self.routes)


def dispatch(routes: RouteTable, request, headers: Optional[Dict[str, str]] = None):
    """
    Route one request and convert every outcome into a response.

    OPTIONS requests are answered with 204 before any route lookup. Otherwise
    the first matching route's handler is called exactly once with the
    request context and path parameters. ApiError subclasses become their
    own status and detail; anything else is logged and becomes a generic 500.
    """
    headers = headers or {}
    if request.method == 'OPTIONS':
        return empty_response(204, headers)

    matched = routes.match(request.path)
    if matched is None:
        logger.debug(f"No route for {request.method} {request.path}")
        return error_response(RouteNotFoundError.status, RouteNotFoundError.detail, request.path, headers)

    route, params = matched
    try:
        context = RequestContext(request, params)
        return route.handler(context, params)
    except ApiError as e:
        return error_response(e.status, e.detail, request.path, headers)
    except HTTPException as e:
        # e.g. a body over MAX_CONTENT_LENGTH
        return error_response(e.code, e.description, request.path, headers)
    except Exception:
        logger.exception(f"Unhandled error in {route.pattern} for {request.method} {request.path}")
        return error_response(500, 'Internal server error', request.path, headers)
