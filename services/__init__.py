"""
Services package for the ArtistHub API.
Contains the entity services the route table dispatches to.
"""

from services.artist_service import ArtistService
from services.customer_service import CustomerService
from services.events_service import EventsService
from services.finance_service import FinanceService
from services.inventory_service import InventoryService
from services.staff_service import StaffService

__all__ = [
    'ArtistService',
    'CustomerService',
    'EventsService',
    'FinanceService',
    'InventoryService',
    'StaffService'
]
