"""
Request Context - the per-request view handed to route handlers.
"""

import logging
from typing import Any, Dict

from werkzeug.exceptions import BadRequest

from app.api.errors import InvalidJSONBodyError

logger = logging.getLogger(__name__)

_UNSET = object()


def query_params(request) -> Dict[str, str]:
    """Flatten the query string; a repeated key keeps its last value."""
    return {key: values[-1] for key, values in request.args.lists()}


class RequestContext:
    """
    Method, URL, path, path parameters and query of one request.

    The JSON body is parsed on first access to json() and cached.
    """

    def __init__(self, request, params=None):
        self.request = request
        self.method = request.method
        self.url = request.url
        self.path = request.path
        self.params = params or {}
        self.query = query_params(request)
        self._json = _UNSET

    def has_body(self) -> bool:
        return bool(self.request.get_data(cache=True))

    def json(self) -> Any:
        """
        Parsed request body.

        Raises:
            InvalidJSONBodyError: If the body is missing or not valid JSON
        """
        if self._json is _UNSET:
            try:
                self._json = self.request.get_json(force=True)
            except BadRequest:
                logger.warning(f"Invalid JSON body: {self.method} {self.path}")
                raise InvalidJSONBodyError()
        return self._json
