"""
API exceptions raised by route handlers and translated by the dispatcher.
"""


class ApiError(Exception):
    """Base error carrying the HTTP status and detail for the error envelope."""

    status = 500
    detail = 'Internal server error'

    def __init__(self, detail=None, status=None):
        self.detail = detail or self.detail
        self.status = status or self.status
        super().__init__(self.detail)


class InvalidJSONBodyError(ApiError):
    status = 400
    detail = 'Invalid JSON body'


class MethodNotAllowedError(ApiError):
    status = 405
    detail = 'Method not allowed'


class InvalidReportTypeError(ApiError):
    status = 400
    detail = 'Invalid report type'


class RouteNotFoundError(ApiError):
    status = 404
    detail = 'Route not found'
