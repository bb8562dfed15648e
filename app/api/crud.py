"""
CRUD Resource - the generic collection/item adapter shared by every entity.

    GET    /collection       -> list(query)          200 | 400
    POST   /collection       -> create(body)         201 | 400
    GET    /collection/:id   -> get(id)              200 | 404
    PUT    /collection/:id   -> update(id, body)     200 | 400
    DELETE /collection/:id   -> delete(id[, hard])   200 | 400

Any other method raises MethodNotAllowedError.
"""

from typing import Callable, Dict, Optional

from app.api.errors import MethodNotAllowedError
from app.api.responses import CREATE, DELETE, LIST, RETRIEVE, UPDATE, result_response
from validators import parse_bool


class CrudResource:
    """
    Binds one entity's service callables to collection and item handlers.

    Args:
        list_fn: list(query) -> result
        get_fn: get(id) -> result
        create_fn: create(body) -> result
        update_fn: update(id, body) -> result
        delete_fn: delete(id) or delete(id, hard) -> result
        headers: Headers added to every response
        hard_delete: Pass the ``hard`` query flag through to delete_fn
    """

    def __init__(self, list_fn: Callable, get_fn: Callable, create_fn: Callable,
                 update_fn: Callable, delete_fn: Callable,
                 headers: Optional[Dict[str, str]] = None, hard_delete: bool = False):
        self.list_fn = list_fn
        self.get_fn = get_fn
        self.create_fn = create_fn
        self.update_fn = update_fn
        self.delete_fn = delete_fn
        self.headers = headers or {}
        self.hard_delete = hard_delete

    def collection(self, ctx, params):
        if ctx.method == 'GET':
            return result_response(self.list_fn(ctx.query), LIST, ctx.path, self.headers)
        if ctx.method == 'POST':
            return result_response(self.create_fn(ctx.json()), CREATE, ctx.path, self.headers)
        raise MethodNotAllowedError()

    def item(self, ctx, params):
        item_id = params['id']
        if ctx.method == 'GET':
            return result_response(self.get_fn(item_id), RETRIEVE, ctx.path, self.headers)
        if ctx.method == 'PUT':
            return result_response(self.update_fn(item_id, ctx.json()), UPDATE, ctx.path, self.headers)
        if ctx.method == 'DELETE':
            if self.hard_delete:
                result = self.delete_fn(item_id, parse_bool(ctx.query.get('hard')))
            else:
                result = self.delete_fn(item_id)
            return result_response(result, DELETE, ctx.path, self.headers)
        raise MethodNotAllowedError()
