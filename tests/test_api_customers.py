"""
Integration tests for the customer endpoints
"""
import pytest


def create_customer(client, payload):
    response = client.post('/api/customers', json=payload)
    assert response.status_code == 201, response.get_json()
    return response.get_json()['data']


@pytest.mark.integration
class TestCustomerCrud:
    """Tests for /api/customers and /api/customers/:id"""

    def test_create_customer(self, client, sample_customer_data):
        """Test creating a customer returns 201 and camelCase data"""
        response = client.post('/api/customers', json=sample_customer_data)
        data = response.get_json()
        assert response.status_code == 201
        assert data['success'] is True
        assert data['data']['firstName'] == 'Ada'
        assert data['data']['isActive'] is True
        assert data['meta']['source'] == 'customers'
        assert 'requestId' in data['meta']

    def test_create_requires_contact_method(self, client):
        """Test that a customer without email or phone is rejected"""
        response = client.post('/api/customers', json={'firstName': 'No', 'lastName': 'Contact'})
        data = response.get_json()
        assert response.status_code == 400
        assert data['error']['title'] == 'API Error'
        assert data['error']['detail'] == 'Request data validation failed'
        assert data['error']['instance'] == '/api/customers'

    def test_create_rejects_bad_email(self, client, sample_customer_data):
        """Test per-field validation errors are returned"""
        sample_customer_data['email'] = 'not-an-email'
        response = client.post('/api/customers', json=sample_customer_data)
        errors = response.get_json()['error']['errors']
        assert response.status_code == 400
        assert any(e['field'] == 'email' for e in errors)

    def test_non_object_body_rejected(self, client):
        """Test that a JSON array body is a validation failure"""
        response = client.post('/api/customers', json=[1, 2, 3])
        assert response.status_code == 400
        assert response.get_json()['error']['errors'][0]['field'] == 'body'

    def test_get_missing_customer(self, client):
        """Test GET /api/customers/does-not-exist returns 404"""
        response = client.get('/api/customers/does-not-exist')
        data = response.get_json()
        assert response.status_code == 404
        assert data['error']['title'] == 'API Error'
        assert data['error']['status'] == 404
        assert data['error']['detail'] == 'Customer not found'

    def test_get_customer(self, client, sample_customer_data):
        """Test fetching a customer includes interaction count"""
        customer = create_customer(client, sample_customer_data)
        response = client.get(f"/api/customers/{customer['id']}")
        assert response.status_code == 200
        assert response.get_json()['data']['interactionCount'] == 0

    def test_update_customer(self, client, sample_customer_data):
        """Test PUT updates fields"""
        customer = create_customer(client, sample_customer_data)
        response = client.put(f"/api/customers/{customer['id']}", json={'city': 'Dallas'})
        assert response.status_code == 200
        assert response.get_json()['data']['city'] == 'Dallas'

    def test_update_cannot_remove_all_contacts(self, client, sample_customer_data):
        """Test that clearing both email and phone is rejected"""
        customer = create_customer(client, sample_customer_data)
        response = client.put(f"/api/customers/{customer['id']}", json={'email': None, 'phone': None})
        assert response.status_code == 400
        assert response.get_json()['error']['detail'].startswith('contact-method:')

    def test_update_missing_customer_is_400(self, client):
        """Test that a failed update maps to 400"""
        response = client.put('/api/customers/missing', json={'city': 'Dallas'})
        assert response.status_code == 400

    def test_soft_delete_hides_customer(self, client, sample_customer_data):
        """Test DELETE deactivates and hides from the default list"""
        customer = create_customer(client, sample_customer_data)
        response = client.delete(f"/api/customers/{customer['id']}")
        assert response.status_code == 200
        assert response.get_json()['data'] == {'deleted': True, 'hardDelete': False}

        assert client.get('/api/customers').get_json()['data'] == []
        listed = client.get('/api/customers?includeInactive=true').get_json()['data']
        assert [c['id'] for c in listed] == [customer['id']]

    def test_hard_delete_removes_customer(self, client, sample_customer_data):
        """Test DELETE ?hard=true removes the row"""
        customer = create_customer(client, sample_customer_data)
        response = client.delete(f"/api/customers/{customer['id']}?hard=true")
        assert response.get_json()['data']['hardDelete'] is True
        assert client.get(f"/api/customers/{customer['id']}").status_code == 404

    def test_delete_missing_is_400(self, client):
        """Test that deleting an unknown customer maps to 400"""
        assert client.delete('/api/customers/missing').status_code == 400


@pytest.mark.integration
class TestCustomerListing:
    """Tests for list filters and paging"""

    @pytest.fixture
    def customers(self, client):
        people = [
            {'firstName': 'Ada', 'lastName': 'Lovelace', 'email': 'ada@example.com', 'city': 'Austin', 'tags': ['vip']},
            {'firstName': 'Alan', 'lastName': 'Turing', 'email': 'alan@example.com', 'city': 'Boston'},
            {'firstName': 'Grace', 'lastName': 'Hopper', 'phone': '+15550001111', 'city': 'Austin', 'tags': ['vip', 'press']},
        ]
        return [create_customer(client, p) for p in people]

    def test_list_sorted_by_last_name(self, client, customers):
        """Test the default ordering"""
        data = client.get('/api/customers').get_json()
        assert [c['lastName'] for c in data['data']] == ['Hopper', 'Lovelace', 'Turing']
        assert data['meta']['total'] == 3

    def test_filter_by_city(self, client, customers):
        data = client.get('/api/customers?city=Austin').get_json()['data']
        assert {c['firstName'] for c in data} == {'Ada', 'Grace'}

    def test_search(self, client, customers):
        data = client.get('/api/customers?search=tur').get_json()['data']
        assert [c['lastName'] for c in data] == ['Turing']

    def test_filter_by_tag(self, client, customers):
        data = client.get('/api/customers?tag=press').get_json()
        assert [c['firstName'] for c in data['data']] == ['Grace']
        assert data['meta']['total'] == 1

    def test_limit_and_offset(self, client, customers):
        data = client.get('/api/customers?limit=1&offset=1').get_json()
        assert [c['lastName'] for c in data['data']] == ['Lovelace']
        assert data['meta']['limit'] == 1
        assert data['meta']['offset'] == 1
        assert data['meta']['total'] == 3

    def test_repeated_query_key_last_wins(self, client, customers):
        """Test that the last value of a repeated query key is used"""
        data = client.get('/api/customers?city=Boston&city=Austin').get_json()['data']
        assert {c['city'] for c in data} == {'Austin'}


@pytest.mark.integration
class TestCustomerInteractions:
    """Tests for /api/customers/:id/interactions"""

    def test_log_and_list_interactions(self, client, sample_customer_data):
        """Test that interactions are attached to the customer in the path"""
        customer = create_customer(client, sample_customer_data)
        path = f"/api/customers/{customer['id']}/interactions"

        response = client.post(path, json={'type': 'call', 'description': 'Asked about VIP tables'})
        assert response.status_code == 201
        assert response.get_json()['data']['customerId'] == customer['id']

        listed = client.get(path)
        assert listed.status_code == 200
        assert len(listed.get_json()['data']) == 1

    def test_interactions_for_missing_customer_is_404(self, client):
        """Test GET interactions for an unknown customer returns 404"""
        assert client.get('/api/customers/missing/interactions').status_code == 404

    def test_invalid_interaction_type(self, client, sample_customer_data):
        customer = create_customer(client, sample_customer_data)
        response = client.post(
            f"/api/customers/{customer['id']}/interactions",
            json={'type': 'telegram', 'description': 'Stop'}
        )
        assert response.status_code == 400

    def test_interactions_put_not_allowed(self, client):
        assert client.put('/api/customers/x/interactions', json={}).status_code == 405
