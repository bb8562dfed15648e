"""
Tests for status mapping, the error envelope and CORS headers
"""
import json
from datetime import datetime
import pytest
from app.api.responses import (
    API_ERROR_TITLE, CREATE, DELETE, LIST, RETRIEVE, UPDATE,
    cors_headers, error_body, error_response, result_response, status_for
)
from security import build_cors_headers


@pytest.mark.unit
class TestStatusFor:
    """Tests for the operation -> status mapping"""

    @pytest.mark.parametrize('operation,success,expected', [
        (LIST, True, 200), (LIST, False, 400),
        (CREATE, True, 201), (CREATE, False, 400),
        (RETRIEVE, True, 200), (RETRIEVE, False, 404),
        (UPDATE, True, 200), (UPDATE, False, 400),
        (DELETE, True, 200), (DELETE, False, 400),
    ])
    def test_status_table(self, operation, success, expected):
        """Test every operation kind in both outcomes"""
        assert status_for(operation, success) == expected

    def test_unknown_operation_raises(self):
        """Test that an unknown operation kind is a programming error"""
        with pytest.raises(KeyError):
            status_for('merge', True)


@pytest.mark.unit
class TestErrorEnvelope:
    """Tests for the error envelope"""

    def test_envelope_fields(self):
        """Test that the envelope carries the fixed field set"""
        body = error_body(404, 'Route not found', '/api/x')
        assert set(body) == {'error'}
        assert set(body['error']) == {'type', 'title', 'status', 'detail', 'instance', 'timestamp'}
        assert body['error']['title'] == API_ERROR_TITLE == 'API Error'
        assert body['error']['status'] == 404
        assert body['error']['instance'] == '/api/x'

    def test_timestamp_is_iso_utc(self):
        """Test that the timestamp parses as an aware UTC datetime"""
        timestamp = error_body(500, 'x', '/').get('error')['timestamp']
        assert datetime.fromisoformat(timestamp).utcoffset().total_seconds() == 0

    def test_error_response_is_json_with_headers(self):
        """Test that error responses are JSON and carry the given headers"""
        response = error_response(400, 'Invalid JSON body', '/api/customers', cors_headers())
        assert response.status_code == 400
        assert response.mimetype == 'application/json'
        assert json.loads(response.get_data())['error']['detail'] == 'Invalid JSON body'
        assert response.headers['Access-Control-Allow-Origin'] == '*'


@pytest.mark.unit
class TestResultResponse:
    """Tests for rendering service results"""

    def test_result_passed_through_unchanged(self):
        """Test that a successful service result is the response body"""
        result = {'success': True, 'data': [1, 2], 'meta': {'source': 'test'}}
        response = result_response(result, LIST, '/api/events')
        assert json.loads(response.get_data()) == result
        assert response.status_code == 200

    def test_failure_uses_failure_status(self):
        """Test that a failed result maps through status_for"""
        response = result_response({'success': False, 'error': {}}, RETRIEVE, '/api/events/1')
        assert response.status_code == 404

    def test_failure_rendered_as_envelope(self):
        """Test that a failed result keeps its detail inside the API error envelope"""
        result = {
            'success': False,
            'error': {'title': 'Resource Not Found', 'status': 404, 'detail': 'Event not found'},
            'meta': {'source': 'api'},
        }
        body = json.loads(result_response(result, RETRIEVE, '/api/events/1').get_data())
        assert set(body) == {'error'}
        assert body['error']['title'] == 'API Error'
        assert body['error']['status'] == 404
        assert body['error']['detail'] == 'Event not found'
        assert body['error']['instance'] == '/api/events/1'

    def test_failure_keeps_field_errors(self):
        """Test that validation field errors survive into the envelope"""
        errors = [{'field': 'email', 'code': 'invalid', 'message': 'Invalid email format'}]
        result = {'success': False, 'error': {'detail': 'Request data validation failed', 'errors': errors}}
        body = json.loads(result_response(result, CREATE, '/api/artists').get_data())
        assert body['error']['errors'] == errors

    def test_missing_success_flag_is_failure(self):
        """Test that a result without a success flag counts as a failure"""
        response = result_response({}, CREATE, '/api/artists')
        assert response.status_code == 400
        assert json.loads(response.get_data())['error']['detail'] == 'Request failed'


@pytest.mark.unit
class TestCorsHeaders:
    """Tests for cross-origin headers"""

    def test_default_headers(self):
        """Test the default header values"""
        headers = cors_headers()
        assert headers == {
            'Access-Control-Allow-Origin': '*',
            'Access-Control-Allow-Headers': 'authorization, x-client-info, apikey, content-type, x-request-id, x-api-version',
            'Access-Control-Allow-Methods': 'GET, POST, PUT, DELETE, PATCH, OPTIONS',
        }

    def test_headers_from_config(self):
        """Test that the origin comes from configuration"""
        headers = build_cors_headers({'CORS_ORIGIN': 'https://example.com'})
        assert headers['Access-Control-Allow-Origin'] == 'https://example.com'
        assert 'OPTIONS' in headers['Access-Control-Allow-Methods']
