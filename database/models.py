"""
SQLAlchemy models for the ArtistHub API.
Defines the tables behind the customer, inventory, finance, staff, events and artist services.
"""

import uuid
from datetime import datetime, timezone
from sqlalchemy import (
    Column, String, Text, Integer, Float, Boolean, DateTime, Date,
    ForeignKey, JSON, Index
)
from sqlalchemy.orm import relationship
from database.connection import Base


def generate_uuid():
    """Generate a new UUID."""
    return str(uuid.uuid4())


def utcnow():
    """Naive UTC timestamp, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _iso(value):
    return value.isoformat() if value else None


# =============================================================================
# CRM - CUSTOMERS
# =============================================================================

class Customer(Base):
    """Customer records with marketing preferences and loyalty balance."""
    __tablename__ = 'customers'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(255))
    phone = Column(String(20))
    address = Column(String(200))
    city = Column(String(50))
    state = Column(String(30))
    zip = Column(String(10))
    notes = Column(Text)
    birthday = Column(Date)
    tags = Column(JSON, default=list)
    marketing_preferences = Column(JSON, default=dict)
    loyalty_points = Column(Integer, default=0)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    interactions = relationship(
        "CustomerInteraction", back_populates="customer",
        cascade="all, delete-orphan", order_by="CustomerInteraction.date.desc()"
    )

    __table_args__ = (
        Index('ix_customers_email', 'email'),
        Index('ix_customers_last_name', 'last_name'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'email': self.email,
            'phone': self.phone,
            'address': self.address,
            'city': self.city,
            'state': self.state,
            'zip': self.zip,
            'notes': self.notes,
            'birthday': _iso(self.birthday),
            'tags': self.tags or [],
            'marketingPreferences': self.marketing_preferences or {},
            'loyaltyPoints': self.loyalty_points or 0,
            'isActive': self.is_active,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }


class CustomerInteraction(Base):
    """Calls, emails, meetings and other touch points with a customer."""
    __tablename__ = 'customer_interactions'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    customer_id = Column(String(36), ForeignKey('customers.id'), nullable=False)
    type = Column(String(20), nullable=False)
    date = Column(DateTime, default=utcnow)
    description = Column(Text, nullable=False)
    staff_member = Column(String(100))
    created_at = Column(DateTime, default=utcnow)

    customer = relationship("Customer", back_populates="interactions")

    __table_args__ = (
        Index('ix_customer_interactions_customer', 'customer_id'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'customerId': self.customer_id,
            'type': self.type,
            'date': _iso(self.date),
            'description': self.description,
            'staffMember': self.staff_member,
            'createdAt': _iso(self.created_at),
        }


# =============================================================================
# INVENTORY
# =============================================================================

class InventoryCategory(Base):
    """Grouping for inventory items (bar stock, merch, technical gear...)."""
    __tablename__ = 'inventory_categories'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(50), unique=True, nullable=False)
    description = Column(String(200))
    color = Column(String(7))
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow)

    items = relationship("InventoryItem", back_populates="category")

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'color': self.color,
            'isActive': self.is_active,
            'createdAt': _iso(self.created_at),
        }


class InventoryItem(Base):
    """Stocked inventory items."""
    __tablename__ = 'inventory_items'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    category_id = Column(String(36), ForeignKey('inventory_categories.id'))
    name = Column(String(100), nullable=False)
    description = Column(String(500))
    sku = Column(String(50), unique=True, nullable=False)
    unit = Column(String(20), default='piece')
    cost_price = Column(Float, default=0)
    sell_price = Column(Float, default=0)
    current_stock = Column(Integer, default=0)
    min_stock = Column(Integer, default=0)
    supplier = Column(String(100))
    location = Column(String(100))
    tags = Column(JSON, default=list)
    is_active = Column(Boolean, default=True)
    track_stock = Column(Boolean, default=True)
    allow_negative_stock = Column(Boolean, default=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    category = relationship("InventoryCategory", back_populates="items")
    transactions = relationship(
        "StockTransaction", back_populates="item", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index('ix_inventory_items_category', 'category_id'),
    )

    @property
    def stock_status(self):
        if self.current_stock <= 0:
            return 'out'
        if self.current_stock <= (self.min_stock or 0):
            return 'low'
        return 'normal'

    def to_dict(self):
        return {
            'id': self.id,
            'categoryId': self.category_id,
            'name': self.name,
            'description': self.description,
            'sku': self.sku,
            'unit': self.unit,
            'costPrice': self.cost_price,
            'sellPrice': self.sell_price,
            'currentStock': self.current_stock,
            'minStock': self.min_stock,
            'stockStatus': self.stock_status,
            'supplier': self.supplier,
            'location': self.location,
            'tags': self.tags or [],
            'isActive': self.is_active,
            'trackStock': self.track_stock,
            'allowNegativeStock': self.allow_negative_stock,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }


class StockTransaction(Base):
    """Stock movements against an inventory item."""
    __tablename__ = 'stock_transactions'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    inventory_id = Column(String(36), ForeignKey('inventory_items.id'), nullable=False)
    type = Column(String(20), nullable=False)
    quantity = Column(Integer, nullable=False)
    stock_after = Column(Integer)
    reason = Column(String(200))
    reference = Column(String(100))
    staff_member = Column(String(100))
    notes = Column(Text)
    created_at = Column(DateTime, default=utcnow)

    item = relationship("InventoryItem", back_populates="transactions")

    __table_args__ = (
        Index('ix_stock_transactions_inventory', 'inventory_id'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'inventoryId': self.inventory_id,
            'type': self.type,
            'quantity': self.quantity,
            'stockAfter': self.stock_after,
            'reason': self.reason,
            'reference': self.reference,
            'staffMember': self.staff_member,
            'notes': self.notes,
            'createdAt': _iso(self.created_at),
        }


# =============================================================================
# FINANCE
# =============================================================================

class Account(Base):
    """Chart-of-accounts entry."""
    __tablename__ = 'accounts'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=False)
    type = Column(String(20), nullable=False)  # asset, liability, equity, revenue, expense
    number = Column(String(20))
    description = Column(String(500))
    balance = Column(Float, default=0)
    currency = Column(String(3), default='USD')
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow)

    transactions = relationship("FinancialTransaction", back_populates="account")

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'type': self.type,
            'number': self.number,
            'description': self.description,
            'balance': self.balance,
            'currency': self.currency,
            'isActive': self.is_active,
            'createdAt': _iso(self.created_at),
        }


class FinancialTransaction(Base):
    """Income and expense ledger lines."""
    __tablename__ = 'financial_transactions'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    account_id = Column(String(36), ForeignKey('accounts.id'))
    type = Column(String(20), nullable=False)  # income, expense
    amount = Column(Float, nullable=False)
    category = Column(String(50), nullable=False)
    description = Column(String(500))
    date = Column(Date, nullable=False)
    status = Column(String(20), default='completed')
    reference = Column(String(100))
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow)

    account = relationship("Account", back_populates="transactions")

    __table_args__ = (
        Index('ix_financial_transactions_date', 'date'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'accountId': self.account_id,
            'type': self.type,
            'amount': self.amount,
            'category': self.category,
            'description': self.description,
            'date': _iso(self.date),
            'status': self.status,
            'reference': self.reference,
            'isActive': self.is_active,
            'createdAt': _iso(self.created_at),
        }


class Budget(Base):
    """Spending budget for a category over a period."""
    __tablename__ = 'budgets'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=False)
    category = Column(String(50), nullable=False)
    amount = Column(Float, nullable=False)
    spent = Column(Float, default=0)
    period_start = Column(Date, nullable=False)
    period_end = Column(Date, nullable=False)
    alert_threshold = Column(Integer, default=80)
    is_active = Column(Boolean, default=True)
    notes = Column(Text)
    created_at = Column(DateTime, default=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'category': self.category,
            'amount': self.amount,
            'spent': self.spent,
            'periodStart': _iso(self.period_start),
            'periodEnd': _iso(self.period_end),
            'alertThreshold': self.alert_threshold,
            'isActive': self.is_active,
            'notes': self.notes,
            'createdAt': _iso(self.created_at),
        }


# =============================================================================
# STAFF
# =============================================================================

class StaffMember(Base):
    """Venue staff."""
    __tablename__ = 'staff_members'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    first_name = Column(String(50), nullable=False)
    last_name = Column(String(50), nullable=False)
    email = Column(String(255))
    phone = Column(String(20))
    employee_id = Column(String(20), unique=True, nullable=False)
    department = Column(String(30), nullable=False)
    position = Column(String(100), nullable=False)
    hire_date = Column(Date)
    hourly_rate = Column(Float)
    skills = Column(JSON, default=list)
    password_hash = Column(String(255))
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    schedules = relationship(
        "StaffSchedule", back_populates="staff_member", cascade="all, delete-orphan"
    )

    def to_dict(self):
        return {
            'id': self.id,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'email': self.email,
            'phone': self.phone,
            'employeeId': self.employee_id,
            'department': self.department,
            'position': self.position,
            'hireDate': _iso(self.hire_date),
            'hourlyRate': self.hourly_rate,
            'skills': self.skills or [],
            'canLogin': bool(self.password_hash),
            'isActive': self.is_active,
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }


class StaffSchedule(Base):
    """A scheduled shift for a staff member."""
    __tablename__ = 'staff_schedules'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    staff_id = Column(String(36), ForeignKey('staff_members.id'), nullable=False)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    shift_type = Column(String(20), default='regular')
    status = Column(String(20), default='scheduled')
    notes = Column(Text)
    created_at = Column(DateTime, default=utcnow)

    staff_member = relationship("StaffMember", back_populates="schedules")

    __table_args__ = (
        Index('ix_staff_schedules_staff', 'staff_id'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'staffId': self.staff_id,
            'startTime': _iso(self.start_time),
            'endTime': _iso(self.end_time),
            'shiftType': self.shift_type,
            'status': self.status,
            'notes': self.notes,
            'createdAt': _iso(self.created_at),
        }


# =============================================================================
# EVENTS & ARTISTS
# =============================================================================

class Event(Base):
    """Ticketed venue event."""
    __tablename__ = 'events'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    title = Column(String(200), nullable=False)
    description = Column(Text)
    date = Column(Date, nullable=False)
    start_time = Column(String(5))
    end_time = Column(String(5))
    total_capacity = Column(Integer, nullable=False)
    tickets_sold = Column(Integer, default=0)
    ticket_price = Column(Float, default=0)
    genre = Column(String(50))
    image = Column(String(500))
    status = Column(String(20), default='upcoming')
    cancellation_reason = Column(String(500))
    artist_ids = Column(JSON, default=list)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        Index('ix_events_date', 'date'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'date': _iso(self.date),
            'startTime': self.start_time,
            'endTime': self.end_time,
            'totalCapacity': self.total_capacity,
            'ticketsSold': self.tickets_sold or 0,
            'ticketPrice': self.ticket_price,
            'genre': self.genre,
            'image': self.image,
            'status': self.status,
            'cancellationReason': self.cancellation_reason,
            'artistIds': self.artist_ids or [],
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }


class Artist(Base):
    """Performing artist."""
    __tablename__ = 'artists'

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(100), nullable=False)
    genre = Column(String(50), nullable=False)
    location = Column(String(100))
    email = Column(String(255))
    phone = Column(String(20))
    bio = Column(Text)
    image = Column(String(500))
    status = Column(String(20), default='Inquiry')
    social_media = Column(JSON, default=dict)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'genre': self.genre,
            'location': self.location,
            'email': self.email,
            'phone': self.phone,
            'bio': self.bio,
            'image': self.image,
            'status': self.status,
            'socialMedia': self.social_media or {},
            'createdAt': _iso(self.created_at),
            'updatedAt': _iso(self.updated_at),
        }
