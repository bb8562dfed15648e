"""
Pytest configuration and shared fixtures
"""
import sys
import pytest
from pathlib import Path
from werkzeug.test import EnvironBuilder

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


@pytest.fixture
def app_config():
    """Fixture providing test configuration"""
    from config import TestingConfig
    return TestingConfig


@pytest.fixture
def app(app_config):
    """Flask app backed by a fresh in-memory SQLite database"""
    from app_init import create_app
    return create_app(app_config)


@pytest.fixture
def client(app):
    """Flask test client"""
    return app.test_client()


@pytest.fixture
def services(app):
    """Entity services wired to the test database"""
    return app.services


@pytest.fixture
def make_request():
    """Build a standalone werkzeug request for dispatcher tests"""
    def _make(path, method='GET', **kwargs):
        return EnvironBuilder(path=path, method=method, **kwargs).get_request()
    return _make


@pytest.fixture
def sample_customer_data():
    """Fixture providing a valid customer payload"""
    return {
        'firstName': 'Ada',
        'lastName': 'Lovelace',
        'email': 'ada@example.com',
        'phone': '+15551234567',
        'city': 'Austin',
        'state': 'TX',
        'tags': ['vip'],
    }


@pytest.fixture
def sample_item_data():
    """Fixture providing a valid inventory item payload"""
    return {
        'name': 'IPA Keg',
        'sku': 'ipa-001',
        'unit': 'case',
        'costPrice': 80.0,
        'sellPrice': 150.0,
        'currentStock': 10,
        'minStock': 3,
        'location': 'Cellar',
    }


@pytest.fixture
def sample_staff_data():
    """Fixture providing a valid staff member payload"""
    return {
        'firstName': 'Grace',
        'lastName': 'Hopper',
        'email': 'grace@example.com',
        'employeeId': 'EMP-001',
        'department': 'operations',
        'position': 'Floor Manager',
        'hourlyRate': 28.5,
    }


@pytest.fixture
def sample_event_data():
    """Fixture providing a valid event payload"""
    return {
        'title': 'Friday Night Jazz',
        'date': '2024-06-14',
        'startTime': '20:00',
        'endTime': '23:30',
        'totalCapacity': 100,
        'ticketPrice': 25.0,
        'genre': 'Jazz',
    }


@pytest.fixture
def sample_artist_data():
    """Fixture providing a valid artist payload"""
    return {
        'name': 'The Night Owls',
        'genre': 'Jazz',
        'location': 'New Orleans',
        'email': 'booking@nightowls.example.com',
        'status': 'Pending',
        'socialMedia': {'instagram': 'https://instagram.com/nightowls'},
    }
