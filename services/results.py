"""
Service Results - the {success, data | error, meta} shape every entity service returns.

Successful results reach the client as-is; for failures the API layer keeps
only ``detail`` and ``errors`` and wraps them in its error envelope.
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

ERROR_DOCS_BASE = 'https://docs.trainstation-dashboard.com/errors'


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _meta(source: str) -> Dict[str, Any]:
    return {
        'requestId': str(uuid.uuid4()),
        'timestamp': _timestamp(),
        'source': source,
    }


def success_result(data: Any, source: str = 'api', **meta) -> Dict[str, Any]:
    """Wrap service data in a success result."""
    result_meta = _meta(source)
    result_meta.update(meta)
    return {'success': True, 'data': data, 'meta': result_meta}


def error_result(title: str, status: int, detail: str, error_type: str = 'api-error',
                 instance: str = '/api/error', errors: Optional[List[Dict]] = None,
                 source: str = 'api') -> Dict[str, Any]:
    """Build a failure result carrying a problem-details style error."""
    error = {
        'type': f"{ERROR_DOCS_BASE}/{error_type}",
        'title': title,
        'status': status,
        'detail': detail,
        'instance': instance,
        'timestamp': _timestamp(),
    }
    if errors:
        error['errors'] = errors
    return {'success': False, 'error': error, 'meta': _meta(source)}


def validation_error_result(errors: List[Dict], detail: str = 'Request data validation failed') -> Dict[str, Any]:
    return error_result(
        'Validation Error', 400, detail,
        error_type='validation-error', instance='/validation',
        errors=errors, source='validation'
    )


def not_found_result(resource: str) -> Dict[str, Any]:
    return error_result(
        'Resource Not Found', 404, f"{resource} not found",
        error_type='not-found', instance='/not-found'
    )


def business_rule_error_result(rule: str, reason: str) -> Dict[str, Any]:
    return error_result(
        'Business Rule Violation', 400, f"{rule}: {reason}",
        error_type='business-rule-violation', instance='/business-rules'
    )


def database_error_result(detail: str = 'Database operation failed') -> Dict[str, Any]:
    return error_result(
        'Database Error', 500, detail,
        error_type='database-error', instance='/database', source='database'
    )
