"""Offer state, status transitions and the intents the coordinator emits."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Tuple, Union


class OfferStatus(str, enum.Enum):
    OFFERED = "offered"
    ASSIGNED = "assigned"
    COMPLETED = "completed"


# The only legal edges; COMPLETED is terminal.
LEGAL_TRANSITIONS = {
    OfferStatus.OFFERED: OfferStatus.ASSIGNED,
    OfferStatus.ASSIGNED: OfferStatus.COMPLETED,
}


class Transition(enum.Enum):
    OK = "ok"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class Stop:
    address: str
    note: str = ""

    @classmethod
    def parse(cls, raw: str) -> "Stop":
        """Build a stop from the ``"address||note"`` wire format."""
        address, _, note = raw.partition("||")
        return cls(address=address.strip(), note=note.strip())


@dataclass
class Offer:
    id: str
    requester_id: str
    origin: str
    destination: str
    weight: str
    category: str
    price_quote: Decimal
    distance_km: float
    stops: Tuple[Stop, ...] = ()
    indications: str = ""
    requester_phone: Optional[str] = None
    ride_date: Optional[str] = None
    created_ts: float = 0.0
    status: OfferStatus = OfferStatus.OFFERED
    assigned_driver_id: Optional[str] = None  # set only once ASSIGNED

    def is_open(self) -> bool:
        return self.status is OfferStatus.OFFERED


# ----------------------------------------------------------------------
# Outbound intents. The coordinator only emits these; delivery belongs to
# the messaging gateway.
# ----------------------------------------------------------------------
@dataclass(frozen=True)
class NotifyIntent:
    channel_id: str
    offer: Offer


@dataclass(frozen=True)
class DecisionIntent:
    channel_id: str  # winner
    offer: Offer


@dataclass(frozen=True)
class LostIntent:
    channel_id: str
    offer_id: str


@dataclass(frozen=True)
class CompletionIntent:
    channel_id: str
    offer: Offer


@dataclass(frozen=True)
class ExpiryIntent:
    channel_id: str
    offer_id: str


Intent = Union[NotifyIntent, DecisionIntent, LostIntent, CompletionIntent, ExpiryIntent]


@dataclass
class AcceptResult:
    offer: Offer
    intents: list = field(default_factory=list)
    already_assigned: bool = False  # repeated accept by the winner


@dataclass
class TerminateResult:
    offer: Offer
    intents: list = field(default_factory=list)
