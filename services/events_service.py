"""
Events Service - ticketed venue events, cancellations and ticket sales.
"""

import logging
from typing import Any, Dict, Optional

from sqlalchemy import or_

from database.models import Event
from services.base import (
    BaseService, Field, assign_fields, body_must_be_object, db_operation, validate_fields
)
from services.results import (
    business_rule_error_result, not_found_result, success_result, validation_error_result
)
from validators import (
    TIME_PATTERN, FieldErrors, parse_iso_date, validate_choice, validate_integer,
    validate_iso_date, validate_number_range, validate_pattern, validate_string_length,
    validate_string_list, validate_url
)

logger = logging.getLogger(__name__)

EVENT_STATUSES = ['upcoming', 'completed', 'cancelled']


def _time(name):
    return lambda v: validate_pattern(v, TIME_PATTERN, f"{name} must be in HH:MM format")


EVENT_FIELDS = {
    'title': Field('title', lambda v: validate_string_length(v, 1, 200), required=True),
    'description': Field('description', lambda v: validate_string_length(v, 0, 5000)),
    'date': Field('date', validate_iso_date, parse=parse_iso_date, required=True),
    'startTime': Field('start_time', _time('startTime')),
    'endTime': Field('end_time', _time('endTime')),
    'totalCapacity': Field('total_capacity', lambda v: validate_integer(v, 1), required=True),
    'ticketsSold': Field('tickets_sold', lambda v: validate_integer(v, 0), nullable=False),
    'ticketPrice': Field('ticket_price', lambda v: validate_number_range(v, 0), nullable=False),
    'genre': Field('genre', lambda v: validate_string_length(v, 0, 50)),
    'image': Field('image', validate_url),
    'status': Field('status', lambda v: validate_choice(v, EVENT_STATUSES), nullable=False),
    'artistIds': Field('artist_ids', lambda v: validate_string_list(v, 50, 36), nullable=False),
}


class EventsService(BaseService):
    """Event listings plus the ticketing and cancellation workflow."""

    source = 'events'

    @db_operation
    def list_events(self, query: Dict[str, Any]):
        """List events by status, genre, artist, date range or free text."""
        errors = FieldErrors()
        for name in ('dateFrom', 'dateTo'):
            if query.get(name):
                errors.check(name, validate_iso_date(query[name]))
        if errors:
            return validation_error_result(errors.as_list())

        with self._session() as session:
            q = session.query(Event)
            if query.get('status'):
                q = q.filter(Event.status == query['status'])
            if query.get('genre'):
                q = q.filter(Event.genre == query['genre'])
            if query.get('dateFrom'):
                q = q.filter(Event.date >= parse_iso_date(query['dateFrom']))
            if query.get('dateTo'):
                q = q.filter(Event.date <= parse_iso_date(query['dateTo']))
            if query.get('search'):
                search = f"%{query['search']}%"
                q = q.filter(or_(Event.title.ilike(search), Event.description.ilike(search)))

            descending = self._sort_direction(query)
            q = q.order_by(Event.date.desc() if descending else Event.date.asc(), Event.start_time)

            artist_id = query.get('artistId')
            post_filter = (lambda e: artist_id in (e.artist_ids or [])) if artist_id else None
            return self._paged_result(q, query, post_filter)

    @db_operation
    def get_event(self, event_id: str):
        with self._session() as session:
            event = session.get(Event, event_id)
            if not event:
                return not_found_result('Event')
            data = event.to_dict()
            data['ticketsAvailable'] = max(event.total_capacity - (event.tickets_sold or 0), 0)
            return success_result(data, source=self.source)

    @db_operation
    def create_event(self, data: Dict[str, Any]):
        invalid = body_must_be_object(data)
        if invalid:
            return invalid
        errors = validate_fields(data, EVENT_FIELDS)
        if not errors and data.get('ticketsSold', 0) and data['ticketsSold'] > data['totalCapacity']:
            errors.add('ticketsSold', 'Tickets sold cannot exceed total capacity', 'invalid')
        if errors:
            return validation_error_result(errors.as_list())

        with self._session() as session:
            event = Event(tickets_sold=0, ticket_price=0, status='upcoming', artist_ids=[])
            assign_fields(event, data, EVENT_FIELDS)
            session.add(event)
            session.flush()
            logger.info(f"Created event: {event.id}")
            return success_result(event.to_dict(), source=self.source)

    @db_operation
    def update_event(self, event_id: str, data: Dict[str, Any]):
        invalid = body_must_be_object(data)
        if invalid:
            return invalid
        errors = validate_fields(data, EVENT_FIELDS, partial=True)
        if errors:
            return validation_error_result(errors.as_list())

        with self._session() as session:
            event = session.get(Event, event_id)
            if not event:
                return not_found_result('Event')

            capacity = data.get('totalCapacity', event.total_capacity)
            sold = data.get('ticketsSold', event.tickets_sold or 0)
            if sold > capacity:
                return business_rule_error_result(
                    'capacity', f"Tickets sold ({sold}) cannot exceed total capacity ({capacity})"
                )

            assign_fields(event, data, EVENT_FIELDS)
            session.flush()
            logger.info(f"Updated event: {event_id}")
            return success_result(event.to_dict(), source=self.source)

    @db_operation
    def delete_event(self, event_id: str):
        with self._session() as session:
            event = session.get(Event, event_id)
            if not event:
                return not_found_result('Event')
            session.delete(event)
            logger.info(f"Deleted event: {event_id}")
            return success_result({'deleted': True}, source=self.source)

    @db_operation
    def cancel_event(self, event_id: str, reason: Optional[str] = None):
        if reason is not None:
            errors = FieldErrors()
            errors.check('reason', validate_string_length(reason, 0, 500))
            if errors:
                return validation_error_result(errors.as_list())

        with self._session() as session:
            event = session.get(Event, event_id)
            if not event:
                return not_found_result('Event')
            if event.status == 'cancelled':
                return business_rule_error_result('already-cancelled', 'Event is already cancelled')
            if event.status == 'completed':
                return business_rule_error_result('event-completed', 'Completed events cannot be cancelled')
            event.status = 'cancelled'
            event.cancellation_reason = reason.strip() if reason else None
            session.flush()
            logger.info(f"Cancelled event {event_id}: {reason or 'no reason given'}")
            return success_result(event.to_dict(), source=self.source)

    @db_operation
    def sell_tickets(self, event_id: str, quantity: Any):
        """Sell tickets for an upcoming event; only ticketsSold changes."""
        errors = FieldErrors()
        errors.check('quantity', validate_integer(quantity, 1))
        if errors:
            return validation_error_result(errors.as_list())

        with self._session() as session:
            event = session.get(Event, event_id)
            if not event:
                return not_found_result('Event')
            if event.status == 'cancelled':
                return business_rule_error_result('event-cancelled', 'Cannot sell tickets for a cancelled event')
            if event.status == 'completed':
                return business_rule_error_result('event-completed', 'Cannot sell tickets for a completed event')

            available = event.total_capacity - (event.tickets_sold or 0)
            if quantity > available:
                return business_rule_error_result(
                    'capacity', f"Only {available} tickets available"
                )
            event.tickets_sold = (event.tickets_sold or 0) + quantity
            session.flush()
            logger.info(f"Sold {quantity} tickets for event {event_id} ({event.tickets_sold}/{event.total_capacity})")
            return success_result(event.to_dict(), source=self.source)
