"""
Integration tests for the staff endpoints and shift scheduling
"""
import pytest
from werkzeug.security import check_password_hash

from database.models import StaffMember


def create_staff(client, payload):
    response = client.post('/api/staff', json=payload)
    assert response.status_code == 201, response.get_json()
    return response.get_json()['data']


@pytest.mark.integration
class TestStaffCrud:
    """Tests for /api/staff and /api/staff/:id"""

    def test_create_staff(self, client, sample_staff_data):
        member = create_staff(client, sample_staff_data)
        assert member['employeeId'] == 'EMP-001'
        assert member['department'] == 'operations'
        assert 'passwordHash' not in member
        assert 'password_hash' not in member

    def test_password_is_hashed(self, app, client, sample_staff_data):
        """Test that a supplied password is stored as a werkzeug hash"""
        member = create_staff(client, {**sample_staff_data, 'password': 'correct horse battery'})
        session = app.services['staff'].session_factory()
        try:
            stored = session.get(StaffMember, member['id'])
            assert stored.password_hash != 'correct horse battery'
            assert check_password_hash(stored.password_hash, 'correct horse battery')
        finally:
            session.close()
        assert member['canLogin'] is True

    def test_short_password_rejected(self, client, sample_staff_data):
        response = client.post('/api/staff', json={**sample_staff_data, 'password': 'short'})
        assert response.status_code == 400

    def test_duplicate_employee_id(self, client, sample_staff_data):
        create_staff(client, sample_staff_data)
        response = client.post('/api/staff', json={**sample_staff_data, 'email': 'other@example.com'})
        assert response.status_code == 400
        assert 'unique-employee-id' in response.get_json()['error']['detail']

    def test_invalid_department(self, client, sample_staff_data):
        response = client.post('/api/staff', json={**sample_staff_data, 'department': 'astronomy'})
        assert response.status_code == 400

    def test_list_by_department(self, client, sample_staff_data):
        create_staff(client, sample_staff_data)
        create_staff(client, {**sample_staff_data, 'employeeId': 'EMP-002', 'lastName': 'Kay', 'department': 'security'})
        data = client.get('/api/staff?department=security').get_json()['data']
        assert [m['lastName'] for m in data] == ['Kay']

    def test_update_and_delete(self, client, sample_staff_data):
        member = create_staff(client, sample_staff_data)
        response = client.put(f"/api/staff/{member['id']}", json={'position': 'General Manager'})
        assert response.get_json()['data']['position'] == 'General Manager'

        assert client.delete(f"/api/staff/{member['id']}").status_code == 200
        assert client.get('/api/staff').get_json()['data'] == []
        assert len(client.get('/api/staff?isActive=false').get_json()['data']) == 1

    def test_get_missing_staff(self, client):
        assert client.get('/api/staff/missing').status_code == 404


@pytest.mark.integration
class TestStaffSchedule:
    """Tests for /api/staff/:id/schedule"""

    @pytest.fixture
    def member(self, client, sample_staff_data):
        return create_staff(client, sample_staff_data)

    def schedule(self, client, member, start, end, **fields):
        return client.post(f"/api/staff/{member['id']}/schedule", json={
            'startTime': start, 'endTime': end, **fields
        })

    def test_create_shift(self, client, member):
        response = self.schedule(client, member, '2024-01-10T17:00:00', '2024-01-10T23:00:00', shiftType='event')
        data = response.get_json()['data']
        assert response.status_code == 201
        assert data['staffId'] == member['id']
        assert data['shiftType'] == 'event'
        assert data['status'] == 'scheduled'

    def test_end_must_follow_start(self, client, member):
        response = self.schedule(client, member, '2024-01-10T23:00:00', '2024-01-10T17:00:00')
        assert response.status_code == 400

    def test_overlapping_shift_rejected(self, client, member):
        self.schedule(client, member, '2024-01-10T17:00:00', '2024-01-10T23:00:00')
        response = self.schedule(client, member, '2024-01-10T22:00:00', '2024-01-11T02:00:00')
        assert response.status_code == 400
        assert response.get_json()['error']['detail'].startswith('Shift overlaps existing shift')

    def test_back_to_back_shifts_allowed(self, client, member):
        self.schedule(client, member, '2024-01-10T09:00:00', '2024-01-10T17:00:00')
        response = self.schedule(client, member, '2024-01-10T17:00:00', '2024-01-10T23:00:00')
        assert response.status_code == 201

    def test_schedule_date_range(self, client, member):
        self.schedule(client, member, '2024-01-10T09:00:00', '2024-01-10T17:00:00')
        self.schedule(client, member, '2024-02-10T09:00:00', '2024-02-10T17:00:00')
        response = client.get(f"/api/staff/{member['id']}/schedule?dateFrom=2024-01-01&dateTo=2024-01-31")
        data = response.get_json()['data']
        assert response.status_code == 200
        assert [s['startTime'][:10] for s in data] == ['2024-01-10']

    def test_schedule_for_missing_staff_is_404(self, client):
        assert client.get('/api/staff/missing/schedule').status_code == 404

    def test_schedule_post_for_missing_staff(self, client):
        response = client.post('/api/staff/missing/schedule', json={
            'startTime': '2024-01-10T09:00:00', 'endTime': '2024-01-10T17:00:00'
        })
        assert response.status_code == 400
