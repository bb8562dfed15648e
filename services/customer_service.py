"""
Customer Service - CRM customers and their interaction history.
"""

import logging
from typing import Any, Dict

from sqlalchemy import or_

from database.models import Customer, CustomerInteraction
from services.base import (
    BaseService, Field, assign_fields, body_must_be_object, db_operation, validate_fields
)
from services.results import (
    business_rule_error_result, not_found_result, success_result, validation_error_result
)
from validators import (
    ZIP_PATTERN, parse_bool, parse_iso_date, parse_iso_datetime, validate_choice,
    validate_email, validate_integer, validate_iso_date, validate_iso_datetime,
    validate_pattern, validate_phone, validate_string_length, validate_string_list
)

logger = logging.getLogger(__name__)

INTERACTION_TYPES = ['call', 'email', 'meeting', 'event', 'purchase', 'note', 'other']

DEFAULT_MARKETING_PREFERENCES = {
    'emailPromotions': False,
    'smsNotifications': False,
    'newsletter': False,
    'specialEvents': True,
    'unsubscribed': False,
}


def _validate_marketing_preferences(value):
    if not isinstance(value, dict):
        return False, "Marketing preferences must be an object"
    for key, flag in value.items():
        if key not in DEFAULT_MARKETING_PREFERENCES:
            return False, f"Unknown marketing preference: {key}"
        if not isinstance(flag, bool):
            return False, f"{key} must be a boolean"
    if value.get('unsubscribed') and any(
            value.get(key) for key in ('emailPromotions', 'smsNotifications', 'newsletter')):
        return False, "Unsubscribed customers cannot have marketing preferences enabled"
    return True, None


CUSTOMER_FIELDS = {
    'firstName': Field('first_name', lambda v: validate_string_length(v, 1, 50), required=True),
    'lastName': Field('last_name', lambda v: validate_string_length(v, 1, 50), required=True),
    'email': Field('email', validate_email, parse=lambda v: v.strip().lower()),
    'phone': Field('phone', validate_phone),
    'address': Field('address', lambda v: validate_string_length(v, 0, 200)),
    'city': Field('city', lambda v: validate_string_length(v, 0, 50)),
    'state': Field('state', lambda v: validate_string_length(v, 0, 30)),
    'zip': Field('zip', lambda v: validate_pattern(v, ZIP_PATTERN, "Invalid ZIP code format")),
    'notes': Field('notes', lambda v: validate_string_length(v, 0, 1000)),
    'birthday': Field('birthday', validate_iso_date, parse=parse_iso_date),
    'tags': Field('tags', validate_string_list, parse=lambda v: [t.strip() for t in v], nullable=False),
    'marketingPreferences': Field(
        'marketing_preferences', _validate_marketing_preferences,
        parse=lambda v: {**DEFAULT_MARKETING_PREFERENCES, **v}, nullable=False
    ),
    'loyaltyPoints': Field('loyalty_points', lambda v: validate_integer(v, 0), nullable=False),
    'isActive': Field('is_active', lambda v: (isinstance(v, bool), "isActive must be a boolean"), nullable=False),
}

INTERACTION_FIELDS = {
    'customerId': Field('customer_id', required=True),
    'type': Field('type', lambda v: validate_choice(v, INTERACTION_TYPES), required=True),
    'date': Field('date', validate_iso_datetime, parse=parse_iso_datetime),
    'description': Field('description', lambda v: validate_string_length(v, 1, 2000), required=True),
    'staffMember': Field('staff_member', lambda v: validate_string_length(v, 0, 100)),
}

SORT_COLUMNS = {
    'firstName': Customer.first_name,
    'lastName': Customer.last_name,
    'email': Customer.email,
    'customerSince': Customer.created_at,
}


class CustomerService(BaseService):
    """Customer CRUD plus interaction log."""

    source = 'customers'

    @db_operation
    def list_customers(self, query: Dict[str, Any]):
        """List customers filtered by search/city/state/tag with paging."""
        with self._session() as session:
            q = session.query(Customer)
            if not parse_bool(query.get('includeInactive')):
                q = q.filter(Customer.is_active == True)  # noqa: E712
            if query.get('search'):
                search = f"%{query['search']}%"
                q = q.filter(or_(
                    Customer.first_name.ilike(search),
                    Customer.last_name.ilike(search),
                    Customer.email.ilike(search)
                ))
            if query.get('city'):
                q = q.filter(Customer.city == query['city'])
            if query.get('state'):
                q = q.filter(Customer.state == query['state'])

            column = SORT_COLUMNS.get(query.get('sortBy'), Customer.last_name)
            q = q.order_by(column.desc() if self._sort_direction(query) else column.asc())

            tag = query.get('tag')
            post_filter = (lambda c: tag in (c.tags or [])) if tag else None
            return self._paged_result(q, query, post_filter)

    @db_operation
    def get_customer(self, customer_id: str):
        with self._session() as session:
            customer = session.get(Customer, customer_id)
            if not customer:
                return not_found_result('Customer')
            data = customer.to_dict()
            data['interactionCount'] = len(customer.interactions)
            return success_result(data, source=self.source)

    @db_operation
    def create_customer(self, data: Dict[str, Any]):
        invalid = body_must_be_object(data)
        if invalid:
            return invalid
        errors = validate_fields(data, CUSTOMER_FIELDS)
        if not data.get('email') and not data.get('phone'):
            errors.add('email', 'Customer must have at least one contact method (email or phone)', 'required')
        if errors:
            return validation_error_result(errors.as_list())

        with self._session() as session:
            customer = Customer(
                tags=[],
                marketing_preferences=dict(DEFAULT_MARKETING_PREFERENCES),
                loyalty_points=0,
                is_active=True
            )
            assign_fields(customer, data, CUSTOMER_FIELDS)
            session.add(customer)
            session.flush()
            logger.info(f"Created customer: {customer.id}")
            return success_result(customer.to_dict(), source=self.source)

    @db_operation
    def update_customer(self, customer_id: str, data: Dict[str, Any]):
        invalid = body_must_be_object(data)
        if invalid:
            return invalid
        errors = validate_fields(data, CUSTOMER_FIELDS, partial=True)
        if errors:
            return validation_error_result(errors.as_list())

        with self._session() as session:
            customer = session.get(Customer, customer_id)
            if not customer:
                return not_found_result('Customer')

            email = data['email'] if 'email' in data else customer.email
            phone = data['phone'] if 'phone' in data else customer.phone
            if not email and not phone:
                return business_rule_error_result(
                    'contact-method', 'Customer must have at least one contact method'
                )

            changes = assign_fields(customer, data, CUSTOMER_FIELDS)
            session.flush()
            logger.info(f"Updated customer: {customer_id} ({', '.join(changes) or 'no changes'})")
            return success_result(customer.to_dict(), source=self.source)

    @db_operation
    def delete_customer(self, customer_id: str, hard_delete: bool = False):
        """Soft delete (deactivate) a customer, or remove it with its interactions."""
        with self._session() as session:
            customer = session.get(Customer, customer_id)
            if not customer:
                return not_found_result('Customer')
            if hard_delete:
                session.delete(customer)
                logger.info(f"Deleted customer: {customer_id}")
            else:
                customer.is_active = False
                logger.info(f"Deleted (deactivated) customer: {customer_id}")
            return success_result({'deleted': True, 'hardDelete': hard_delete}, source=self.source)

    @db_operation
    def list_interactions(self, customer_id: str):
        with self._session() as session:
            customer = session.get(Customer, customer_id)
            if not customer:
                return not_found_result('Customer')
            return success_result(
                [i.to_dict() for i in customer.interactions], source=self.source
            )

    @db_operation
    def create_interaction(self, data: Dict[str, Any]):
        invalid = body_must_be_object(data)
        if invalid:
            return invalid
        errors = validate_fields(data, INTERACTION_FIELDS)
        if errors:
            return validation_error_result(errors.as_list())

        with self._session() as session:
            if not session.get(Customer, data['customerId']):
                return not_found_result('Customer')
            interaction = CustomerInteraction()
            assign_fields(interaction, data, INTERACTION_FIELDS)
            session.add(interaction)
            session.flush()
            logger.info(f"Logged {interaction.type} interaction for customer {interaction.customer_id}")
            return success_result(interaction.to_dict(), source=self.source)
