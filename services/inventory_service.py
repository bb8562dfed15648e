"""
Inventory Service - stock items, categories and stock movements.
"""

import logging
from typing import Any, Dict

from sqlalchemy import or_

from database.models import InventoryCategory, InventoryItem, StockTransaction
from services.base import (
    BaseService, Field, assign_fields, body_must_be_object, db_operation, validate_fields
)
from services.results import (
    business_rule_error_result, not_found_result, success_result, validation_error_result
)
from validators import (
    HEX_COLOR_PATTERN, parse_bool, validate_choice, validate_integer,
    validate_number_range, validate_pattern, validate_string_length,
    validate_string_list, validate_uuid
)

logger = logging.getLogger(__name__)

UNITS = ['piece', 'box', 'case', 'bottle', 'kg', 'lb', 'liter', 'gallon', 'meter', 'yard']

# Stock movement types and the sign they apply to the quantity
TRANSACTION_SIGNS = {
    'in': 1,
    'out': -1,
    'damaged': -1,
    'expired': -1,
    'adjustment': 1,  # quantity is already signed
}


def _boolean(name):
    return lambda v: (isinstance(v, bool), f"{name} must be a boolean")


ITEM_FIELDS = {
    'name': Field('name', lambda v: validate_string_length(v, 1, 100), required=True),
    'description': Field('description', lambda v: validate_string_length(v, 0, 500)),
    'sku': Field('sku', lambda v: validate_string_length(v, 1, 50), parse=lambda v: v.strip().upper(), required=True),
    'categoryId': Field('category_id', validate_uuid),
    'unit': Field('unit', lambda v: validate_choice(v, UNITS), nullable=False),
    'costPrice': Field('cost_price', lambda v: validate_number_range(v, 0), nullable=False),
    'sellPrice': Field('sell_price', lambda v: validate_number_range(v, 0), nullable=False),
    'currentStock': Field('current_stock', validate_integer, nullable=False),
    'minStock': Field('min_stock', lambda v: validate_integer(v, 0), nullable=False),
    'supplier': Field('supplier', lambda v: validate_string_length(v, 0, 100)),
    'location': Field('location', lambda v: validate_string_length(v, 0, 100)),
    'tags': Field('tags', validate_string_list, nullable=False),
    'isActive': Field('is_active', _boolean('isActive'), nullable=False),
    'trackStock': Field('track_stock', _boolean('trackStock'), nullable=False),
    'allowNegativeStock': Field('allow_negative_stock', _boolean('allowNegativeStock'), nullable=False),
}

CATEGORY_FIELDS = {
    'name': Field('name', lambda v: validate_string_length(v, 1, 50), required=True),
    'description': Field('description', lambda v: validate_string_length(v, 0, 200)),
    'color': Field('color', lambda v: validate_pattern(v, HEX_COLOR_PATTERN, "Color must be a hex value like #1a2b3c")),
    'isActive': Field('is_active', _boolean('isActive'), nullable=False),
}

TRANSACTION_FIELDS = {
    'inventoryId': Field('inventory_id', validate_uuid, required=True),
    'type': Field('type', lambda v: validate_choice(v, list(TRANSACTION_SIGNS)), required=True),
    'quantity': Field('quantity', validate_integer, required=True),
    'reason': Field('reason', lambda v: validate_string_length(v, 0, 200)),
    'reference': Field('reference', lambda v: validate_string_length(v, 0, 100)),
    'staffMember': Field('staff_member', lambda v: validate_string_length(v, 0, 100)),
    'notes': Field('notes', lambda v: validate_string_length(v, 0, 1000)),
}

SORT_COLUMNS = {
    'name': InventoryItem.name,
    'sku': InventoryItem.sku,
    'currentStock': InventoryItem.current_stock,
    'costPrice': InventoryItem.cost_price,
    'sellPrice': InventoryItem.sell_price,
    'lastUpdated': InventoryItem.updated_at,
}


class InventoryService(BaseService):
    """Inventory items, categories and stock movements."""

    source = 'inventory'

    @db_operation
    def list_items(self, query: Dict[str, Any]):
        """List inventory items with optional filters."""
        with self._session() as session:
            q = session.query(InventoryItem)
            if 'isActive' in query:
                q = q.filter(InventoryItem.is_active == parse_bool(query['isActive']))
            else:
                q = q.filter(InventoryItem.is_active == True)  # noqa: E712
            if query.get('search'):
                search = f"%{query['search']}%"
                q = q.filter(or_(
                    InventoryItem.name.ilike(search),
                    InventoryItem.sku.ilike(search),
                    InventoryItem.description.ilike(search)
                ))
            if query.get('categoryId'):
                q = q.filter(InventoryItem.category_id == query['categoryId'])
            if query.get('supplier'):
                q = q.filter(InventoryItem.supplier == query['supplier'])
            if query.get('location'):
                q = q.filter(InventoryItem.location == query['location'])

            stock_status = query.get('stockStatus')
            if stock_status == 'out':
                q = q.filter(InventoryItem.current_stock <= 0)
            elif stock_status == 'low':
                q = q.filter(
                    InventoryItem.current_stock > 0,
                    InventoryItem.current_stock <= InventoryItem.min_stock
                )
            elif stock_status == 'normal':
                q = q.filter(InventoryItem.current_stock > InventoryItem.min_stock)

            column = SORT_COLUMNS.get(query.get('sortBy'), InventoryItem.name)
            q = q.order_by(column.desc() if self._sort_direction(query) else column.asc())
            return self._paged_result(q, query)

    @db_operation
    def get_item(self, item_id: str):
        with self._session() as session:
            item = session.get(InventoryItem, item_id)
            if not item:
                return not_found_result('Inventory item')
            data = item.to_dict()
            data['stockValue'] = round(item.current_stock * (item.cost_price or 0), 2)
            return success_result(data, source=self.source)

    @db_operation
    def create_item(self, data: Dict[str, Any]):
        invalid = body_must_be_object(data)
        if invalid:
            return invalid
        errors = validate_fields(data, ITEM_FIELDS)
        if errors:
            return validation_error_result(errors.as_list())

        with self._session() as session:
            sku = data['sku'].strip().upper()
            if session.query(InventoryItem).filter(InventoryItem.sku == sku).first():
                return business_rule_error_result('unique-sku', f"SKU {sku} already exists")
            if data.get('categoryId') and not session.get(InventoryCategory, data['categoryId']):
                return not_found_result('Inventory category')

            item = InventoryItem(
                unit='piece', cost_price=0, sell_price=0, current_stock=0, min_stock=0,
                tags=[], is_active=True, track_stock=True, allow_negative_stock=False
            )
            assign_fields(item, data, ITEM_FIELDS)
            if item.current_stock < 0 and not item.allow_negative_stock:
                return business_rule_error_result('negative-stock', 'Initial stock cannot be negative')
            session.add(item)
            session.flush()
            logger.info(f"Created inventory item: {item.id}")
            return success_result(item.to_dict(), source=self.source)

    @db_operation
    def update_item(self, item_id: str, data: Dict[str, Any]):
        invalid = body_must_be_object(data)
        if invalid:
            return invalid
        errors = validate_fields(data, ITEM_FIELDS, partial=True)
        if errors:
            return validation_error_result(errors.as_list())

        with self._session() as session:
            item = session.get(InventoryItem, item_id)
            if not item:
                return not_found_result('Inventory item')
            if 'sku' in data:
                sku = data['sku'].strip().upper()
                clash = session.query(InventoryItem).filter(
                    InventoryItem.sku == sku, InventoryItem.id != item_id
                ).first()
                if clash:
                    return business_rule_error_result('unique-sku', f"SKU {sku} already exists")
            if data.get('categoryId') and not session.get(InventoryCategory, data['categoryId']):
                return not_found_result('Inventory category')

            assign_fields(item, data, ITEM_FIELDS)
            if (item.current_stock or 0) < 0 and not item.allow_negative_stock:
                # Discard the assigned values; the session commits on exit
                session.rollback()
                return business_rule_error_result('negative-stock', 'Stock cannot be negative')
            session.flush()
            logger.info(f"Updated inventory item: {item_id}")
            return success_result(item.to_dict(), source=self.source)

    @db_operation
    def delete_item(self, item_id: str, hard_delete: bool = False):
        """Soft delete (deactivate) an item, or remove it with its stock history."""
        with self._session() as session:
            item = session.get(InventoryItem, item_id)
            if not item:
                return not_found_result('Inventory item')
            if hard_delete:
                session.delete(item)
                logger.info(f"Deleted inventory item: {item_id}")
            else:
                item.is_active = False
                logger.info(f"Deleted (deactivated) inventory item: {item_id}")
            return success_result({'deleted': True, 'hardDelete': hard_delete}, source=self.source)

    @db_operation
    def record_transaction(self, data: Dict[str, Any]):
        """Record a stock movement and apply it to the item's current stock."""
        invalid = body_must_be_object(data)
        if invalid:
            return invalid
        errors = validate_fields(data, TRANSACTION_FIELDS)
        if not errors and data['type'] != 'adjustment' and data['quantity'] <= 0:
            errors.add('quantity', 'Quantity must be positive', 'invalid')
        if not errors and data['type'] == 'adjustment' and data['quantity'] == 0:
            errors.add('quantity', 'Adjustment cannot be zero', 'invalid')
        if errors:
            return validation_error_result(errors.as_list())

        with self._session() as session:
            item = session.get(InventoryItem, data['inventoryId'])
            if not item:
                return not_found_result('Inventory item')

            delta = TRANSACTION_SIGNS[data['type']] * data['quantity']
            new_stock = item.current_stock + delta
            if item.track_stock and new_stock < 0 and not item.allow_negative_stock:
                return business_rule_error_result(
                    'insufficient-stock',
                    f"Only {item.current_stock} {item.unit} of {item.name} in stock"
                )

            if item.track_stock:
                item.current_stock = new_stock
            transaction = StockTransaction(stock_after=item.current_stock)
            assign_fields(transaction, data, TRANSACTION_FIELDS)
            session.add(transaction)
            session.flush()
            logger.info(f"Adjusted inventory {item.id} by {delta}: {data.get('reason') or data['type']}")
            return success_result(transaction.to_dict(), source=self.source)

    @db_operation
    def list_item_transactions(self, item_id: str):
        with self._session() as session:
            if not session.get(InventoryItem, item_id):
                return not_found_result('Inventory item')
            transactions = session.query(StockTransaction).filter(
                StockTransaction.inventory_id == item_id
            ).order_by(StockTransaction.created_at.desc()).all()
            return success_result([t.to_dict() for t in transactions], source=self.source)

    @db_operation
    def list_categories(self):
        with self._session() as session:
            categories = session.query(InventoryCategory).order_by(InventoryCategory.name).all()
            return success_result([c.to_dict() for c in categories], source=self.source)

    @db_operation
    def create_category(self, data: Dict[str, Any]):
        invalid = body_must_be_object(data)
        if invalid:
            return invalid
        errors = validate_fields(data, CATEGORY_FIELDS)
        if errors:
            return validation_error_result(errors.as_list())

        with self._session() as session:
            name = data['name'].strip()
            if session.query(InventoryCategory).filter(InventoryCategory.name.ilike(name)).first():
                return business_rule_error_result('unique-category', f"Category {name} already exists")
            category = InventoryCategory(is_active=True)
            assign_fields(category, data, CATEGORY_FIELDS)
            session.add(category)
            session.flush()
            logger.info(f"Created inventory category: {category.id}")
            return success_result(category.to_dict(), source=self.source)

    @db_operation
    def list_alerts(self):
        """Active, stock-tracked items that are out of stock or at/below their minimum."""
        with self._session() as session:
            items = session.query(InventoryItem).filter(
                InventoryItem.is_active == True,  # noqa: E712
                InventoryItem.track_stock == True,  # noqa: E712
                InventoryItem.current_stock <= InventoryItem.min_stock
            ).order_by(InventoryItem.current_stock).all()
            alerts = [{
                'inventoryId': item.id,
                'name': item.name,
                'sku': item.sku,
                'currentStock': item.current_stock,
                'minStock': item.min_stock,
                'severity': 'critical' if item.current_stock <= 0 else 'warning',
                'type': 'out_of_stock' if item.current_stock <= 0 else 'low_stock',
            } for item in items]
            return success_result(alerts, source=self.source)
