"""
Staff Service - staff members and their shift schedules.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import or_
from werkzeug.security import generate_password_hash

from database.models import StaffMember, StaffSchedule
from services.base import (
    BaseService, Field, assign_fields, body_must_be_object, db_operation, validate_fields
)
from services.results import (
    business_rule_error_result, error_result, not_found_result, success_result,
    validation_error_result
)
from validators import (
    IDENTIFIER_PATTERN, FieldErrors, parse_bool, parse_iso_date, parse_iso_datetime,
    validate_choice, validate_email, validate_iso_date, validate_iso_datetime,
    validate_number_range, validate_pattern, validate_phone, validate_string_length,
    validate_string_list
)

logger = logging.getLogger(__name__)

DEPARTMENTS = [
    'management', 'events', 'finance', 'marketing', 'operations',
    'security', 'maintenance', 'customer_service', 'technical'
]
SHIFT_TYPES = ['regular', 'overtime', 'on_call', 'event']
SCHEDULE_STATUSES = ['scheduled', 'confirmed', 'completed', 'cancelled']
MIN_PASSWORD_LENGTH = 8

STAFF_FIELDS = {
    'firstName': Field('first_name', lambda v: validate_string_length(v, 1, 50), required=True),
    'lastName': Field('last_name', lambda v: validate_string_length(v, 1, 50), required=True),
    'email': Field('email', validate_email, parse=lambda v: v.strip().lower()),
    'phone': Field('phone', validate_phone),
    'employeeId': Field(
        'employee_id',
        lambda v: validate_pattern(v, IDENTIFIER_PATTERN, "Employee ID can only contain letters, numbers, hyphens, and underscores")
        if isinstance(v, str) and len(v) <= 20 else (False, "Employee ID must be at most 20 characters"),
        required=True
    ),
    'department': Field('department', lambda v: validate_choice(v, DEPARTMENTS), required=True),
    'position': Field('position', lambda v: validate_string_length(v, 1, 100), required=True),
    'hireDate': Field('hire_date', validate_iso_date, parse=parse_iso_date),
    'hourlyRate': Field('hourly_rate', lambda v: validate_number_range(v, 0, 1000)),
    'skills': Field('skills', validate_string_list, nullable=False),
    'isActive': Field('is_active', lambda v: (isinstance(v, bool), "isActive must be a boolean"), nullable=False),
}

SCHEDULE_FIELDS = {
    'staffId': Field('staff_id', required=True),
    'startTime': Field('start_time', validate_iso_datetime, parse=parse_iso_datetime, required=True),
    'endTime': Field('end_time', validate_iso_datetime, parse=parse_iso_datetime, required=True),
    'shiftType': Field('shift_type', lambda v: validate_choice(v, SHIFT_TYPES), nullable=False),
    'status': Field('status', lambda v: validate_choice(v, SCHEDULE_STATUSES), nullable=False),
    'notes': Field('notes', lambda v: validate_string_length(v, 0, 500)),
}


def _check_password(data: Dict[str, Any], errors: FieldErrors):
    password = data.get('password')
    if password is None:
        return
    if not isinstance(password, str) or len(password) < MIN_PASSWORD_LENGTH:
        errors.add('password', f"Password must be at least {MIN_PASSWORD_LENGTH} characters", 'invalid')
    elif 'confirmPassword' in data and data['confirmPassword'] != password:
        errors.add('confirmPassword', 'Passwords do not match', 'invalid')


class StaffService(BaseService):
    """Staff directory and scheduling."""

    source = 'staff'

    @db_operation
    def list_staff(self, query: Dict[str, Any]):
        with self._session() as session:
            q = session.query(StaffMember)
            if 'isActive' in query:
                q = q.filter(StaffMember.is_active == parse_bool(query['isActive']))
            else:
                q = q.filter(StaffMember.is_active == True)  # noqa: E712
            if query.get('department'):
                q = q.filter(StaffMember.department == query['department'])
            if query.get('search'):
                search = f"%{query['search']}%"
                q = q.filter(or_(
                    StaffMember.first_name.ilike(search),
                    StaffMember.last_name.ilike(search),
                    StaffMember.email.ilike(search),
                    StaffMember.employee_id.ilike(search)
                ))
            q = q.order_by(StaffMember.last_name, StaffMember.first_name)
            return self._paged_result(q, query)

    @db_operation
    def get_staff(self, staff_id: str):
        with self._session() as session:
            member = session.get(StaffMember, staff_id)
            if not member:
                return not_found_result('Staff member')
            return success_result(member.to_dict(), source=self.source)

    @db_operation
    def create_staff(self, data: Dict[str, Any]):
        invalid = body_must_be_object(data)
        if invalid:
            return invalid
        errors = validate_fields(data, STAFF_FIELDS)
        _check_password(data, errors)
        if errors:
            return validation_error_result(errors.as_list())

        with self._session() as session:
            employee_id = data['employeeId'].strip()
            if session.query(StaffMember).filter(StaffMember.employee_id == employee_id).first():
                return business_rule_error_result('unique-employee-id', f"Employee ID {employee_id} already exists")

            member = StaffMember(skills=[], is_active=True)
            assign_fields(member, data, STAFF_FIELDS)
            if data.get('password'):
                member.password_hash = generate_password_hash(data['password'], method='pbkdf2:sha256')
            session.add(member)
            session.flush()
            logger.info(f"Created staff member: {member.id}")
            return success_result(member.to_dict(), source=self.source)

    @db_operation
    def update_staff(self, staff_id: str, data: Dict[str, Any]):
        invalid = body_must_be_object(data)
        if invalid:
            return invalid
        errors = validate_fields(data, STAFF_FIELDS, partial=True)
        _check_password(data, errors)
        if errors:
            return validation_error_result(errors.as_list())

        with self._session() as session:
            member = session.get(StaffMember, staff_id)
            if not member:
                return not_found_result('Staff member')
            if 'employeeId' in data:
                clash = session.query(StaffMember).filter(
                    StaffMember.employee_id == data['employeeId'].strip(),
                    StaffMember.id != staff_id
                ).first()
                if clash:
                    return business_rule_error_result('unique-employee-id', f"Employee ID {data['employeeId']} already exists")

            assign_fields(member, data, STAFF_FIELDS)
            if data.get('password'):
                member.password_hash = generate_password_hash(data['password'], method='pbkdf2:sha256')
            session.flush()
            logger.info(f"Updated staff member: {staff_id}")
            return success_result(member.to_dict(), source=self.source)

    @db_operation
    def delete_staff(self, staff_id: str, hard_delete: bool = False):
        with self._session() as session:
            member = session.get(StaffMember, staff_id)
            if not member:
                return not_found_result('Staff member')
            if hard_delete:
                session.delete(member)
                logger.info(f"Deleted staff member: {staff_id}")
            else:
                member.is_active = False
                logger.info(f"Deleted (deactivated) staff member: {staff_id}")
            return success_result({'deleted': True, 'hardDelete': hard_delete}, source=self.source)

    @db_operation
    def get_schedule(self, staff_id: str, date_from: Optional[str] = None, date_to: Optional[str] = None):
        """Shifts for a staff member, optionally limited to a date range."""
        errors = FieldErrors()
        if date_from:
            errors.check('dateFrom', validate_iso_datetime(date_from))
        if date_to:
            errors.check('dateTo', validate_iso_datetime(date_to))
        if errors:
            return validation_error_result(errors.as_list())

        with self._session() as session:
            if not session.get(StaffMember, staff_id):
                return not_found_result('Staff member')
            q = session.query(StaffSchedule).filter(StaffSchedule.staff_id == staff_id)
            if date_from:
                q = q.filter(StaffSchedule.start_time >= parse_iso_datetime(date_from))
            if date_to:
                end = parse_iso_datetime(date_to)
                if len(date_to) == 10:
                    # A bare date includes the whole day
                    end = end.replace(hour=23, minute=59, second=59)
                q = q.filter(StaffSchedule.end_time <= end)
            shifts = q.order_by(StaffSchedule.start_time).all()
            return success_result([s.to_dict() for s in shifts], source=self.source)

    @db_operation
    def create_schedule_entry(self, data: Dict[str, Any]):
        """Schedule a shift; rejects shifts that overlap the member's existing ones."""
        invalid = body_must_be_object(data)
        if invalid:
            return invalid
        errors = validate_fields(data, SCHEDULE_FIELDS)
        if errors:
            return validation_error_result(errors.as_list())

        start = parse_iso_datetime(data['startTime'])
        end = parse_iso_datetime(data['endTime'])
        if end <= start:
            errors.add('endTime', 'End time must be after start time', 'invalid')
            return validation_error_result(errors.as_list())

        with self._session() as session:
            member = session.get(StaffMember, data['staffId'])
            if not member:
                return not_found_result('Staff member')
            if not member.is_active:
                return business_rule_error_result('inactive-staff', 'Cannot schedule an inactive staff member')

            conflict = session.query(StaffSchedule).filter(
                StaffSchedule.staff_id == member.id,
                StaffSchedule.status != 'cancelled',
                StaffSchedule.start_time < end,
                StaffSchedule.end_time > start
            ).first()
            if conflict:
                return error_result(
                    'Schedule Conflict', 400,
                    f"Shift overlaps existing shift {conflict.id} "
                    f"({conflict.start_time.isoformat()} - {conflict.end_time.isoformat()})",
                    error_type='schedule-conflict', instance='/api/staff/schedules',
                    source='validation'
                )

            shift = StaffSchedule(shift_type='regular', status='scheduled')
            assign_fields(shift, data, SCHEDULE_FIELDS)
            session.add(shift)
            session.flush()
            logger.info(f"Scheduled shift {shift.id} for staff member {member.id}")
            return success_result(shift.to_dict(), source=self.source)
