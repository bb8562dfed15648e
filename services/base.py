"""
Shared plumbing for the entity services: session handling, database error
conversion, field validation and pagination.
"""

import logging
from functools import wraps
from typing import Any, Callable, Dict, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from database.connection import get_db_session
from services.results import database_error_result, success_result, validation_error_result
from validators import FieldErrors, parse_int, sanitize_string

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100
MAX_TEXT_LENGTH = 10000


def db_operation(func: Callable) -> Callable:
    """
    Convert SQLAlchemy failures raised by a service method into a
    database-error result instead of letting them reach the API layer.
    """
    @wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except SQLAlchemyError as e:
            logger.error(f"{type(self).__name__}.{func.__name__} failed: {e}")
            return database_error_result()
    return wrapper


class Field:
    """
    One writable API field of an entity.

    Args:
        column: Model attribute the value is stored in
        validator: Callable returning (is_valid, error_message)
        parse: Converts the validated API value into the column value
        required: Must be present on create
        nullable: An explicit null clears the column
    """

    def __init__(self, column: str, validator: Optional[Callable[[Any], Tuple[bool, Optional[str]]]] = None,
                 parse: Optional[Callable[[Any], Any]] = None, required: bool = False,
                 nullable: bool = True):
        self.column = column
        self.validator = validator
        self.parse = parse
        self.required = required
        self.nullable = nullable

    def convert(self, value):
        if value is None:
            return None
        if self.parse:
            return self.parse(value)
        if isinstance(value, str):
            return sanitize_string(value, MAX_TEXT_LENGTH)
        return value


def validate_fields(data: Dict[str, Any], fields: Dict[str, Field], partial: bool = False) -> FieldErrors:
    """
    Validate a request body against an entity's field table.

    On create (partial=False) required fields must be present; on update only
    the supplied fields are checked.
    """
    errors = FieldErrors()
    if not partial:
        errors.require(data, [name for name, field in fields.items() if field.required])
    for name, field in fields.items():
        if name not in data:
            continue
        value = data[name]
        if value is None or value == '':
            if (field.required and partial) or (not field.required and not field.nullable):
                errors.add(name, f"{name} cannot be empty", 'required')
            continue
        if field.validator:
            errors.check(name, field.validator(value))
    return errors


def assign_fields(instance: Any, data: Dict[str, Any], fields: Dict[str, Field]) -> Dict[str, Any]:
    """Copy supplied fields onto a model instance. Returns the changed values."""
    changes = {}
    for name, field in fields.items():
        if name not in data:
            continue
        value = field.convert(data[name] if data[name] != '' else None)
        if getattr(instance, field.column) != value:
            changes[name] = value
        setattr(instance, field.column, value)
    return changes


def body_must_be_object(data: Any) -> Optional[Dict[str, Any]]:
    """Validation result for non-object JSON bodies, or None when the body is usable."""
    if isinstance(data, dict):
        return None
    errors = FieldErrors()
    errors.add('body', 'Request body must be a JSON object', 'invalid_type')
    return validation_error_result(errors.as_list())


class BaseService:
    """Base class for services that open one database session per call."""

    source = 'api'

    def __init__(self, session_factory, page_size: int = DEFAULT_PAGE_SIZE,
                 max_page_size: int = MAX_PAGE_SIZE):
        self.session_factory = session_factory
        self.page_size = page_size
        self.max_page_size = max_page_size

    def _session(self):
        return get_db_session(self.session_factory)

    def _pagination(self, query: Dict[str, Any]) -> Tuple[int, int]:
        """Read limit/offset from query parameters (page is accepted as an alternative to offset)."""
        limit = parse_int(query.get('limit'), self.page_size, 1, self.max_page_size)
        if 'offset' in query:
            offset = parse_int(query.get('offset'), 0, 0)
        else:
            page = parse_int(query.get('page'), 1, 1)
            offset = (page - 1) * limit
        return limit, offset

    @staticmethod
    def _sort_direction(query: Dict[str, Any], default: str = 'asc') -> bool:
        """True when results should be sorted descending."""
        return str(query.get('sortOrder', default)).lower() == 'desc'

    def _paged_result(self, query, params: Dict[str, Any], post_filter: Optional[Callable] = None):
        """
        Run a list query and return one page of results with paging meta.

        When post_filter is given (filters that cannot be expressed in SQL,
        e.g. JSON list membership), rows are filtered in Python before slicing.
        """
        limit, offset = self._pagination(params)
        if post_filter is None:
            total = query.order_by(None).count()
            rows = query.limit(limit).offset(offset).all()
        else:
            matching = [row for row in query.all() if post_filter(row)]
            total = len(matching)
            rows = matching[offset:offset + limit]
        return success_result(
            [row.to_dict() for row in rows], source=self.source,
            total=total, limit=limit, offset=offset
        )
