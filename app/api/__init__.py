"""
API Package

The /api surface is a single Flask blueprint in front of an explicit route
table, rather than one blueprint per domain.

MODULE REFERENCE:
=================

- gateway.py         : Flask blueprint forwarding every /api request to dispatch()
- router.py          : Route, RouteTable and the dispatch() error boundary
- routes.py          : build_routes() - the ordered table for every endpoint
- crud.py            : CrudResource - generic collection/item adapter
- request_context.py : RequestContext - path params, query, lazy JSON body
- responses.py       : JSON/error envelope responses, CORS headers, status_for()
- errors.py          : ApiError hierarchy

ENDPOINTS:
==========

/api/health                          GET
/api/customers                       GET, POST
/api/customers/:id                   GET, PUT, DELETE (?hard=true)
/api/customers/:id/interactions      GET, POST
/api/inventory                       GET, POST
/api/inventory/transactions          POST
/api/inventory/categories            GET, POST
/api/inventory/alerts                GET
/api/inventory/:id                   GET, PUT, DELETE (?hard=true)
/api/inventory/:id/transactions      GET
/api/finances/transactions           GET, POST
/api/finances/accounts               GET, POST
/api/finances/budgets                GET, POST
/api/finances/reports/:reportType    GET (profit-loss, balance-sheet, cash-flow)
/api/staff                           GET, POST
/api/staff/:id                       GET, PUT, DELETE (?hard=true)
/api/staff/:id/schedule              GET, POST
/api/events                          GET, POST
/api/events/:id                      GET, PUT, DELETE
/api/events/:id/cancel               POST
/api/events/:id/tickets              POST
/api/artists                         GET, POST
/api/artists/:id                     GET, PUT, DELETE
"""

__all__ = []
