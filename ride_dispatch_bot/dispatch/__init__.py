"""Offer dispatch: coordinator, service facade and error taxonomy."""

from .errors import (
    AlreadyTaken,
    DispatchError,
    DuplicateOffer,
    NotNotified,
    NotOwnerOrNotActive,
    UnknownOffer,
    UnregisteredDriver,
)

__all__ = [
    "AlreadyTaken",
    "DispatchError",
    "DuplicateOffer",
    "NotNotified",
    "NotOwnerOrNotActive",
    "UnknownOffer",
    "UnregisteredDriver",
]
