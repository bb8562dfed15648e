"""
Database package for the ArtistHub API.
Provides SQLAlchemy models, connection management, and session handling.
"""

from database.connection import (
    Base,
    configure_database,
    get_engine,
    get_session_factory,
    get_db_session,
    init_db,
    check_db_connection
)

from database.models import (
    Customer,
    CustomerInteraction,
    InventoryCategory,
    InventoryItem,
    StockTransaction,
    Account,
    FinancialTransaction,
    Budget,
    StaffMember,
    StaffSchedule,
    Event,
    Artist
)

__all__ = [
    # Connection
    'Base',
    'configure_database',
    'get_engine',
    'get_session_factory',
    'get_db_session',
    'init_db',
    'check_db_connection',
    # Models
    'Customer',
    'CustomerInteraction',
    'InventoryCategory',
    'InventoryItem',
    'StockTransaction',
    'Account',
    'FinancialTransaction',
    'Budget',
    'StaffMember',
    'StaffSchedule',
    'Event',
    'Artist'
]
