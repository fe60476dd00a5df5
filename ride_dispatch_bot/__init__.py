"""Core package for the ride dispatch bot.

This module exposes the dispatch coordinator, its data types and the
storage layer so that consumers of the package can simply import them
from ``ride_dispatch_bot``.
"""

from .core.directory import DriverDirectory
from .core.models import Driver, RideRecord
from .core.storage import JSONStorage
from .data.ledger import NotificationLedger
from .data.models import Offer, OfferStatus, Stop
from .data.store import OfferStore
from .dispatch.coordinator import DispatchCoordinator

__all__ = [
    "DispatchCoordinator",
    "Driver",
    "DriverDirectory",
    "JSONStorage",
    "NotificationLedger",
    "Offer",
    "OfferStatus",
    "OfferStore",
    "RideRecord",
    "Stop",
]
