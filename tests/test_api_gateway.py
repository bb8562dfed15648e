"""
Integration tests for the /api gateway: routing, envelopes and CORS
"""
import pytest


CORS_ORIGIN = 'Access-Control-Allow-Origin'


@pytest.mark.integration
class TestGatewayRouting:
    """Tests for dispatcher behaviour through the Flask app"""

    def test_api_health(self, client):
        """Test GET /api/health lists the six services"""
        response = client.get('/api/health')
        data = response.get_json()
        assert response.status_code == 200
        assert data['status'] == 'healthy'
        assert 'timestamp' in data
        assert data['services'] == ['customers', 'inventory', 'finances', 'staff', 'events', 'artists']
        assert response.headers[CORS_ORIGIN] == '*'

    def test_api_health_other_method(self, client):
        """Test that /api/health only answers GET"""
        assert client.post('/api/health').status_code == 405

    def test_unknown_path_is_404(self, client):
        """Test GET /api/unknown/path returns 'Route not found'"""
        response = client.get('/api/unknown/path')
        data = response.get_json()
        assert response.status_code == 404
        assert data['error']['detail'] == 'Route not found'
        assert data['error']['title'] == 'API Error'
        assert data['error']['instance'] == '/api/unknown/path'

    def test_bare_api_prefix_is_404(self, client):
        """Test that /api itself is not a route"""
        assert client.get('/api').status_code == 404

    @pytest.mark.parametrize('path', ['/api/customers', '/api/unknown/path', '/api/events/123/tickets'])
    def test_options_preflight(self, client, path):
        """Test OPTIONS returns 204 with CORS headers on any /api path"""
        response = client.open(path, method='OPTIONS')
        assert response.status_code == 204
        assert response.data == b''
        assert response.headers[CORS_ORIGIN] == '*'
        assert 'x-api-version' in response.headers['Access-Control-Allow-Headers']
        assert 'PATCH' in response.headers['Access-Control-Allow-Methods']

    def test_patch_collection_is_405(self, client):
        """Test PATCH /api/customers returns 405"""
        response = client.patch('/api/customers', json={})
        assert response.status_code == 405
        assert response.get_json()['error']['detail'] == 'Method not allowed'
        assert response.headers[CORS_ORIGIN] == '*'

    def test_invalid_json_body(self, client):
        """Test POST /api/customers with '{not json' returns 400"""
        response = client.post('/api/customers', data='{not json', content_type='application/json')
        data = response.get_json()
        assert response.status_code == 400
        assert data['error']['detail'] == 'Invalid JSON body'
        assert data['error']['status'] == 400

    def test_repeated_get_has_identical_shape(self, client):
        """Test that repeated requests return the same envelope shape"""
        first = client.get('/api/customers').get_json()
        second = client.get('/api/customers').get_json()
        assert set(first) == set(second) == {'success', 'data', 'meta'}
        assert set(first['meta']) == set(second['meta'])

    def test_handler_exception_is_500(self, app, client, services, caplog):
        """Test that an exception escaping a handler becomes a logged 500"""
        def explode(query):
            raise RuntimeError('boom')

        services['artists'].list_artists = explode
        # Rebuild so the route table picks up the patched method
        from app.api.routes import build_routes
        app.api_routes = build_routes(services, app.api_headers)

        response = client.get('/api/artists')
        assert response.status_code == 500
        assert response.get_json()['error']['detail'] == 'Internal server error'
        assert 'boom' not in response.get_data(as_text=True)
        assert any('boom' in str(record.exc_info[1]) for record in caplog.records if record.exc_info)

    def test_security_headers_present(self, client):
        """Test that security headers are added to API responses"""
        response = client.get('/api/health')
        assert response.headers['X-Content-Type-Options'] == 'nosniff'


@pytest.mark.integration
class TestOutsideApiPrefix:
    """Tests for preflights and errors on paths the dispatcher does not own"""

    @pytest.mark.parametrize('path', ['/health', '/x/y', '/'])
    def test_options_anywhere_is_204(self, client, path):
        """Test OPTIONS returns an empty 204 with CORS headers on any path"""
        response = client.open(path, method='OPTIONS')
        assert response.status_code == 204
        assert response.data == b''
        assert response.headers[CORS_ORIGIN] == '*'
        assert 'PATCH' in response.headers['Access-Control-Allow-Methods']

    def test_unknown_path_is_json_404(self, client):
        """Test an unrouted path outside /api gets the error envelope"""
        response = client.get('/unknown')
        data = response.get_json()
        assert response.status_code == 404
        assert response.mimetype == 'application/json'
        assert data['error']['title'] == 'API Error'
        assert data['error']['detail'] == 'Route not found'
        assert data['error']['instance'] == '/unknown'
        assert response.headers[CORS_ORIGIN] == '*'

    def test_wrong_method_on_operational_endpoint(self, client):
        """Test a method a Flask route does not accept gets the JSON 405"""
        response = client.post('/health')
        assert response.status_code == 405
        assert response.get_json()['error']['detail'] == 'Method not allowed'
        assert response.headers[CORS_ORIGIN] == '*'

    def test_unlisted_method_on_api_path(self, client):
        """Test a method no route accepts (TRACE) still gets the JSON 405"""
        response = client.open('/api/customers', method='TRACE')
        assert response.status_code == 405
        assert response.get_json()['error']['instance'] == '/api/customers'
        assert response.headers[CORS_ORIGIN] == '*'

    def test_operational_endpoints_carry_cors(self, client):
        """Test that non-/api responses also carry the cross-origin headers"""
        response = client.get('/health')
        assert response.status_code == 200
        assert response.headers[CORS_ORIGIN] == '*'
