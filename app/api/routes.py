"""
API Routes - builds the ordered route table for every /api endpoint.

Within each collection the literal sub-paths (transactions, categories,
alerts) are registered before the ``:id`` route so first-match-wins reaches
them.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from app.api.crud import CrudResource
from app.api.errors import InvalidReportTypeError, MethodNotAllowedError
from app.api.responses import (
    CREATE, LIST, RETRIEVE, UPDATE, json_response, result_response
)
from app.api.router import RouteTable

logger = logging.getLogger(__name__)

SERVICE_NAMES = ['customers', 'inventory', 'finances', 'staff', 'events', 'artists']


def _with_parent(body: Any, key: str, parent_id: str) -> Any:
    """Attach the parent id from the path to a sub-resource body."""
    if isinstance(body, dict):
        return {**body, key: parent_id}
    return body


def build_routes(services: Dict[str, Any], headers: Dict[str, str],
                 service_names=None) -> RouteTable:
    """
    Build the route table.

    Args:
        services: Service instances keyed by customers, inventory, finances,
            staff, events and artists
        headers: Cross-origin headers added to every response
        service_names: Names reported by /api/health

    Returns:
        RouteTable in match order
    """
    customers = services['customers']
    inventory = services['inventory']
    finances = services['finances']
    staff = services['staff']
    events = services['events']
    artists = services['artists']
    service_names = list(service_names or SERVICE_NAMES)

    routes = RouteTable()

    def respond(ctx, result, operation):
        return result_response(result, operation, ctx.path, headers)

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------

    @routes.route('/api/health')
    def health(ctx, params):
        if ctx.method != 'GET':
            raise MethodNotAllowedError()
        return json_response({
            'status': 'healthy',
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'services': service_names,
        }, 200, headers)

    # ------------------------------------------------------------------
    # Customers
    # ------------------------------------------------------------------

    customer_resource = CrudResource(
        customers.list_customers, customers.get_customer, customers.create_customer,
        customers.update_customer, customers.delete_customer,
        headers=headers, hard_delete=True
    )
    routes.register('/api/customers', customer_resource.collection)
    routes.register('/api/customers/:id', customer_resource.item)

    @routes.route('/api/customers/:id/interactions')
    def customer_interactions(ctx, params):
        if ctx.method == 'GET':
            return respond(ctx, customers.list_interactions(params['id']), RETRIEVE)
        if ctx.method == 'POST':
            body = _with_parent(ctx.json(), 'customerId', params['id'])
            return respond(ctx, customers.create_interaction(body), CREATE)
        raise MethodNotAllowedError()

    # ------------------------------------------------------------------
    # Inventory
    # ------------------------------------------------------------------

    inventory_resource = CrudResource(
        inventory.list_items, inventory.get_item, inventory.create_item,
        inventory.update_item, inventory.delete_item,
        headers=headers, hard_delete=True
    )
    routes.register('/api/inventory', inventory_resource.collection)

    @routes.route('/api/inventory/transactions')
    def inventory_transactions(ctx, params):
        if ctx.method == 'POST':
            return respond(ctx, inventory.record_transaction(ctx.json()), CREATE)
        raise MethodNotAllowedError()

    @routes.route('/api/inventory/categories')
    def inventory_categories(ctx, params):
        if ctx.method == 'GET':
            return respond(ctx, inventory.list_categories(), LIST)
        if ctx.method == 'POST':
            return respond(ctx, inventory.create_category(ctx.json()), CREATE)
        raise MethodNotAllowedError()

    @routes.route('/api/inventory/alerts')
    def inventory_alerts(ctx, params):
        if ctx.method == 'GET':
            return respond(ctx, inventory.list_alerts(), LIST)
        raise MethodNotAllowedError()

    routes.register('/api/inventory/:id', inventory_resource.item)

    @routes.route('/api/inventory/:id/transactions')
    def inventory_item_transactions(ctx, params):
        if ctx.method == 'GET':
            return respond(ctx, inventory.list_item_transactions(params['id']), RETRIEVE)
        raise MethodNotAllowedError()

    # ------------------------------------------------------------------
    # Finances
    # ------------------------------------------------------------------

    @routes.route('/api/finances/transactions')
    def finance_transactions(ctx, params):
        if ctx.method == 'GET':
            return respond(ctx, finances.list_transactions(ctx.query), LIST)
        if ctx.method == 'POST':
            return respond(ctx, finances.create_transaction(ctx.json()), CREATE)
        raise MethodNotAllowedError()

    @routes.route('/api/finances/accounts')
    def finance_accounts(ctx, params):
        if ctx.method == 'GET':
            return respond(ctx, finances.list_accounts(), LIST)
        if ctx.method == 'POST':
            return respond(ctx, finances.create_account(ctx.json()), CREATE)
        raise MethodNotAllowedError()

    @routes.route('/api/finances/budgets')
    def finance_budgets(ctx, params):
        if ctx.method == 'GET':
            return respond(ctx, finances.list_budgets(), LIST)
        if ctx.method == 'POST':
            return respond(ctx, finances.create_budget(ctx.json()), CREATE)
        raise MethodNotAllowedError()

    @routes.route('/api/finances/reports/:reportType')
    def finance_reports(ctx, params):
        if ctx.method != 'GET':
            raise MethodNotAllowedError()
        report_type = params['reportType']
        date_from = ctx.query.get('dateFrom')
        date_to = ctx.query.get('dateTo')
        if report_type == 'profit-loss':
            result = finances.profit_loss_report(date_from, date_to)
        elif report_type == 'balance-sheet':
            result = finances.balance_sheet_report(date_from)
        elif report_type == 'cash-flow':
            result = finances.cash_flow_report(date_from, date_to)
        else:
            raise InvalidReportTypeError()
        return respond(ctx, result, LIST)

    # ------------------------------------------------------------------
    # Staff
    # ------------------------------------------------------------------

    staff_resource = CrudResource(
        staff.list_staff, staff.get_staff, staff.create_staff,
        staff.update_staff, staff.delete_staff,
        headers=headers, hard_delete=True
    )
    routes.register('/api/staff', staff_resource.collection)
    routes.register('/api/staff/:id', staff_resource.item)

    @routes.route('/api/staff/:id/schedule')
    def staff_schedule(ctx, params):
        if ctx.method == 'GET':
            result = staff.get_schedule(params['id'], ctx.query.get('dateFrom'), ctx.query.get('dateTo'))
            return respond(ctx, result, RETRIEVE)
        if ctx.method == 'POST':
            body = _with_parent(ctx.json(), 'staffId', params['id'])
            return respond(ctx, staff.create_schedule_entry(body), CREATE)
        raise MethodNotAllowedError()

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    event_resource = CrudResource(
        events.list_events, events.get_event, events.create_event,
        events.update_event, events.delete_event, headers=headers
    )
    routes.register('/api/events', event_resource.collection)
    routes.register('/api/events/:id', event_resource.item)

    @routes.route('/api/events/:id/cancel')
    def event_cancel(ctx, params):
        if ctx.method != 'POST':
            raise MethodNotAllowedError()
        body = ctx.json() if ctx.has_body() else {}
        reason = body.get('reason') if isinstance(body, dict) else None
        return respond(ctx, events.cancel_event(params['id'], reason), UPDATE)

    @routes.route('/api/events/:id/tickets')
    def event_tickets(ctx, params):
        if ctx.method != 'POST':
            raise MethodNotAllowedError()
        body = ctx.json()
        quantity = body.get('quantity') if isinstance(body, dict) else None
        return respond(ctx, events.sell_tickets(params['id'], quantity), UPDATE)

    # ------------------------------------------------------------------
    # Artists
    # ------------------------------------------------------------------

    artist_resource = CrudResource(
        artists.list_artists, artists.get_artist, artists.create_artist,
        artists.update_artist, artists.delete_artist, headers=headers
    )
    routes.register('/api/artists', artist_resource.collection)
    routes.register('/api/artists/:id', artist_resource.item)

    logger.info(f"API route table built with {len(routes)} routes")
    return routes
