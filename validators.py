"""
Input Validation & Sanitization Utilities
Provides validation for API request bodies and query parameters
"""
import re
import uuid
from datetime import date, datetime, timezone
from typing import Dict, Any, List, Optional, Tuple, Iterable
import logging

logger = logging.getLogger(__name__)

# Regex patterns
EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')
PHONE_PATTERN = re.compile(r'^\+?[1-9]\d{6,14}$')
URL_PATTERN = re.compile(r'^https?://[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}.*$')
ZIP_PATTERN = re.compile(r'^\d{5}(-\d{4})?$')
TIME_PATTERN = re.compile(r'^([01]\d|2[0-3]):[0-5]\d$')
HEX_COLOR_PATTERN = re.compile(r'^#[0-9a-fA-F]{6}$')
IDENTIFIER_PATTERN = re.compile(r'^[A-Za-z0-9_-]+$')


def validate_required_fields(data: Dict[str, Any], required_fields: List[str]) -> Tuple[bool, Optional[str]]:
    """
    Validate that all required fields are present in the data

    Args:
        data: Dictionary of input data
        required_fields: List of required field names

    Returns:
        Tuple of (is_valid, error_message)
    """
    missing_fields = [field for field in required_fields if field not in data or data[field] is None or data[field] == '']

    if missing_fields:
        return False, f"Missing required fields: {', '.join(missing_fields)}"

    return True, None


def validate_email(email: str) -> Tuple[bool, Optional[str]]:
    """
    Validate email format

    Args:
        email: Email address to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not email or not isinstance(email, str):
        return False, "Email must be a non-empty string"

    if not EMAIL_PATTERN.match(email):
        return False, "Invalid email format"

    if len(email) > 254:  # RFC 5321
        return False, "Email address too long"

    return True, None


def validate_phone(phone: str) -> Tuple[bool, Optional[str]]:
    """
    Validate phone number format

    Args:
        phone: Phone number to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not phone or not isinstance(phone, str):
        return False, "Phone must be a non-empty string"

    # Remove common separators
    cleaned_phone = re.sub(r'[\s\-\(\)\.]', '', phone)

    if not PHONE_PATTERN.match(cleaned_phone):
        return False, "Invalid phone number format"

    return True, None


def validate_url(url: str) -> Tuple[bool, Optional[str]]:
    """
    Validate URL format

    Args:
        url: URL to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or not isinstance(url, str):
        return False, "URL must be a non-empty string"

    if not URL_PATTERN.match(url):
        return False, "Invalid URL format"

    if len(url) > 2048:
        return False, "URL too long"

    return True, None


def validate_string_length(value: str, min_length: int = 0, max_length: int = 1000) -> Tuple[bool, Optional[str]]:
    """
    Validate string length is within acceptable range

    Args:
        value: String to validate
        min_length: Minimum allowed length
        max_length: Maximum allowed length

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(value, str):
        return False, "Value must be a string"

    if len(value.strip()) < min_length:
        return False, f"Value too short (minimum {min_length} characters)"

    if len(value) > max_length:
        return False, f"Value too long (maximum {max_length} characters)"

    return True, None


def validate_number_range(value: float, min_value: Optional[float] = None, max_value: Optional[float] = None) -> Tuple[bool, Optional[str]]:
    """
    Validate number is within acceptable range

    Args:
        value: Number to validate
        min_value: Minimum allowed value
        max_value: Maximum allowed value

    Returns:
        Tuple of (is_valid, error_message)
    """
    # bool is an int subclass but never a valid amount
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False, "Value must be a number"

    if min_value is not None and value < min_value:
        return False, f"Value too small (minimum {min_value})"

    if max_value is not None and value > max_value:
        return False, f"Value too large (maximum {max_value})"

    return True, None


def validate_integer(value: Any, min_value: Optional[int] = None, max_value: Optional[int] = None) -> Tuple[bool, Optional[str]]:
    """Validate value is a whole number within range"""
    if isinstance(value, bool) or not isinstance(value, int):
        return False, "Value must be an integer"
    return validate_number_range(value, min_value, max_value)


def validate_choice(value: Any, choices: Iterable[str]) -> Tuple[bool, Optional[str]]:
    """
    Validate value is one of the allowed choices

    Args:
        value: Value to check
        choices: Allowed values

    Returns:
        Tuple of (is_valid, error_message)
    """
    choices = list(choices)
    if value not in choices:
        return False, f"Must be one of: {', '.join(choices)}"
    return True, None


def validate_uuid(value: Any) -> Tuple[bool, Optional[str]]:
    """Validate value is a canonical UUID string"""
    if not isinstance(value, str):
        return False, "Invalid ID"
    try:
        uuid.UUID(value)
    except ValueError:
        return False, "Invalid ID"
    return True, None


def validate_string_list(value: Any, max_items: int = 20, max_length: int = 50) -> Tuple[bool, Optional[str]]:
    """Validate a list of short non-empty strings (tags, skills)"""
    if not isinstance(value, list):
        return False, "Value must be a list"
    if len(value) > max_items:
        return False, f"Maximum {max_items} items allowed"
    for item in value:
        is_valid, error = validate_string_length(item, min_length=1, max_length=max_length)
        if not is_valid:
            return False, f"Invalid item: {error}"
    return True, None


def validate_pattern(value: Any, pattern: re.Pattern, message: str) -> Tuple[bool, Optional[str]]:
    """Validate a string against a compiled regex"""
    if not isinstance(value, str) or not pattern.match(value):
        return False, message
    return True, None


def parse_iso_datetime(value: Any) -> Optional[datetime]:
    """
    Parse an ISO 8601 date or datetime string into a naive UTC datetime.

    Returns None when the value cannot be parsed.
    """
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        return None
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def parse_iso_date(value: Any) -> Optional[date]:
    """Parse an ISO 8601 date (or datetime, truncated to its date)"""
    parsed = parse_iso_datetime(value)
    return parsed.date() if parsed else None


def validate_iso_date(value: Any) -> Tuple[bool, Optional[str]]:
    """Validate an ISO 8601 date string"""
    if parse_iso_date(value) is None:
        return False, "Invalid date format (expected ISO 8601)"
    return True, None


def validate_iso_datetime(value: Any) -> Tuple[bool, Optional[str]]:
    """Validate an ISO 8601 datetime string"""
    if parse_iso_datetime(value) is None:
        return False, "Invalid datetime format (expected ISO 8601)"
    return True, None


def sanitize_string(value: str, max_length: int = 1000) -> str:
    """
    Sanitize string input by removing potentially dangerous characters

    Args:
        value: String to sanitize
        max_length: Maximum allowed length

    Returns:
        Sanitized string
    """
    if not isinstance(value, str):
        return str(value)

    # Remove null bytes
    sanitized = value.replace('\x00', '')

    # Trim whitespace
    sanitized = sanitized.strip()

    # Limit length
    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length]

    return sanitized


def parse_bool(value: Any, default: bool = False) -> bool:
    """Interpret query-string style booleans ('true', '1', 'yes')"""
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ('true', '1', 'yes')


def parse_int(value: Any, default: int, min_value: Optional[int] = None, max_value: Optional[int] = None) -> int:
    """Interpret a query-string integer, clamped to range, falling back to default"""
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    if min_value is not None:
        number = max(min_value, number)
    if max_value is not None:
        number = min(max_value, number)
    return number


class FieldErrors:
    """
    Collects per-field validation failures for a request body.

    Usage:
        errors = FieldErrors()
        errors.check('email', validate_email(data['email']))
        if errors:
            return validation_error_result(errors.as_list())
    """

    def __init__(self):
        self._errors = []

    def add(self, field: str, message: str, code: str = 'invalid', value: Any = None):
        error = {'field': field, 'code': code, 'message': message}
        if value is not None:
            error['value'] = value
        self._errors.append(error)

    def check(self, field: str, result: Tuple[bool, Optional[str]], code: str = 'invalid') -> bool:
        is_valid, message = result
        if not is_valid:
            self.add(field, message, code)
        return is_valid

    def require(self, data: Dict[str, Any], fields: List[str]) -> bool:
        """Record a 'required' error for every missing field"""
        ok = True
        for field in fields:
            is_valid, _ = validate_required_fields(data, [field])
            if not is_valid:
                self.add(field, f"{field} is required", 'required')
                ok = False
        return ok

    def as_list(self) -> List[Dict[str, Any]]:
        return list(self._errors)

    def __bool__(self):
        return bool(self._errors)

    def __len__(self):
        return len(self._errors)
