"""Offer dispatch and acceptance coordination.

The coordinator owns the live lifecycle of every offer:

1. ``dispatch`` stores the offer and records which drivers were told about it.
2. Drivers race to ``accept``; the first compare-and-transition wins and
   everybody else who was told about the offer learns they lost.
3. The winner calls ``terminate`` once the ride is done and the offer leaves
   memory.

Every operation runs under one lock and performs no I/O. The returned
intents are delivered by the caller after the lock has been released.
"""

from __future__ import annotations

import dataclasses
import threading
import time
from collections import OrderedDict
from typing import Callable

from ..core.directory import DriverDirectory
from ..data.ledger import NotificationLedger
from ..data.models import (
    AcceptResult,
    CompletionIntent,
    DecisionIntent,
    ExpiryIntent,
    LostIntent,
    NotifyIntent,
    Offer,
    OfferStatus,
    TerminateResult,
    Transition,
)
from ..data.store import OfferStore
from ..logging_config import get_logger
from .errors import (
    AlreadyTaken,
    DuplicateOffer,
    NotNotified,
    NotOwnerOrNotActive,
    UnknownOffer,
    UnregisteredDriver,
)

logger = get_logger("coordinator")

RETIRED_MEMORY = 1024


class DispatchCoordinator:
    """In-memory state machine for offers: OFFERED -> ASSIGNED -> COMPLETED."""

    def __init__(
        self,
        directory: DriverDirectory,
        offers: OfferStore | None = None,
        ledger: NotificationLedger | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.directory = directory
        self.offers = offers or OfferStore()
        self.ledger = ledger or NotificationLedger()
        self._clock = clock
        self._lock = threading.Lock()
        # offer id -> channels it was dispatched to, kept while the offer is live
        self._audience: dict[str, frozenset[str]] = {}
        # completed/expired ids, refused if the same ride is delivered again
        self._retired: OrderedDict[str, None] = OrderedDict()

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------
    def dispatch(self, offer: Offer) -> list[NotifyIntent]:
        """Store ``offer`` and return one notification per known driver.

        Drivers registered after this call are not notified of ``offer``.
        """
        with self._lock:
            if offer.id in self._retired:
                raise DuplicateOffer(offer.id)
            stamped = dataclasses.replace(
                offer, created_ts=offer.created_ts or self._clock()
            )
            stored = self.offers.put(stamped)

            drivers = self.directory.list_drivers()
            intents: list[NotifyIntent] = []
            for driver in drivers:
                self.ledger.record_notified(driver.channel_id, stored.id)
                intents.append(NotifyIntent(channel_id=driver.channel_id, offer=stored))
            self._audience[stored.id] = frozenset(d.channel_id for d in drivers)

        if not intents:
            logger.warning("Offer %s dispatched but no drivers are registered", offer.id)
        else:
            logger.info("Offer %s dispatched to %d drivers", offer.id, len(intents))
        return intents

    # ------------------------------------------------------------------
    # Accept
    # ------------------------------------------------------------------
    def accept(self, channel_id: str, offer_id: str) -> AcceptResult:
        """Try to assign ``offer_id`` to the driver behind ``channel_id``."""
        channel_id = str(channel_id)
        with self._lock:
            offer = self.offers.get(offer_id)
            if offer is None:
                raise UnknownOffer(offer_id)
            if self.directory.find_by_channel(channel_id) is None:
                raise UnregisteredDriver(offer_id)

            if (
                offer.status is OfferStatus.ASSIGNED
                and offer.assigned_driver_id == channel_id
            ):
                return AcceptResult(offer=offer, intents=[], already_assigned=True)

            if not self.ledger.is_notified(channel_id, offer_id):
                # Losers who were told about the offer are answered as such
                # even though the ledger entry is gone by now.
                if not offer.is_open() and channel_id in self._audience.get(
                    offer_id, ()
                ):
                    raise AlreadyTaken(offer_id)
                raise NotNotified(offer_id)

            outcome = self.offers.compare_and_transition(
                offer_id, OfferStatus.OFFERED, OfferStatus.ASSIGNED, channel_id
            )
            if outcome is Transition.CONFLICT:
                raise AlreadyTaken(offer_id)
            if outcome is Transition.NOT_FOUND:
                raise UnknownOffer(offer_id)

            holders = self.ledger.clear_offer(offer_id)
            assigned = self.offers.get(offer_id)

        intents: list = [DecisionIntent(channel_id=channel_id, offer=assigned)]
        intents.extend(
            LostIntent(channel_id=other, offer_id=offer_id)
            for other in sorted(holders)
            if other != channel_id
        )
        logger.info("Offer %s assigned to %s", offer_id, channel_id)
        return AcceptResult(offer=assigned, intents=intents)

    # ------------------------------------------------------------------
    # Terminate
    # ------------------------------------------------------------------
    def terminate(self, channel_id: str, offer_id: str | None = None) -> TerminateResult:
        """Complete the driver's assigned offer and drop it from memory.

        When ``offer_id`` is omitted the driver's active offer is used.
        """
        channel_id = str(channel_id)
        with self._lock:
            if offer_id is None:
                active = self._active_offer_for(channel_id)
                if active is None:
                    raise NotOwnerOrNotActive()
                offer_id = active.id

            offer = self.offers.get(offer_id)
            if (
                offer is None
                or offer.status is not OfferStatus.ASSIGNED
                or offer.assigned_driver_id != channel_id
            ):
                raise NotOwnerOrNotActive(offer_id)

            outcome = self.offers.compare_and_transition(
                offer_id, OfferStatus.ASSIGNED, OfferStatus.COMPLETED
            )
            if outcome is not Transition.OK:
                raise NotOwnerOrNotActive(offer_id)

            completed = self.offers.remove(offer_id)
            self._retire(offer_id)

        logger.info("Offer %s completed by %s", offer_id, channel_id)
        return TerminateResult(
            offer=completed,
            intents=[CompletionIntent(channel_id=channel_id, offer=completed)],
        )

    # ------------------------------------------------------------------
    # Expiry
    # ------------------------------------------------------------------
    def expire(self, offer_id: str) -> list[ExpiryIntent]:
        """Withdraw an offer nobody accepted. Assigned offers are left alone."""
        with self._lock:
            return self._expire_locked(offer_id)

    def expire_stale(
        self, max_age_seconds: float, now: float | None = None
    ) -> dict[str, list[ExpiryIntent]]:
        """Expire every open offer older than ``max_age_seconds``.

        Returns the expiry intents keyed by the id of each expired offer.
        """
        now = self._clock() if now is None else now
        expired: dict[str, list[ExpiryIntent]] = {}
        with self._lock:
            for offer in self.offers.list_offers(OfferStatus.OFFERED):
                if now - offer.created_ts >= max_age_seconds:
                    expired[offer.id] = self._expire_locked(offer.id)
        return expired

    def _expire_locked(self, offer_id: str) -> list[ExpiryIntent]:
        offer = self.offers.get(offer_id)
        if offer is None or not offer.is_open():
            return []
        self.offers.remove(offer_id)
        holders = self.ledger.clear_offer(offer_id)
        self._retire(offer_id)
        logger.info("Offer %s expired without a driver", offer_id)
        return [ExpiryIntent(channel_id=c, offer_id=offer_id) for c in sorted(holders)]

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get(self, offer_id: str) -> Offer | None:
        return self.offers.get(offer_id)

    def pending_for(self, channel_id: str) -> list[Offer]:
        """Open offers the driver was told about, oldest first."""
        with self._lock:
            ids = self.ledger.offers_for(str(channel_id))
            offers = [o for o in map(self.offers.get, ids) if o and o.is_open()]
        return sorted(offers, key=lambda o: (o.created_ts, o.id))

    def active_offer_for(self, channel_id: str) -> Offer | None:
        with self._lock:
            return self._active_offer_for(str(channel_id))

    def _active_offer_for(self, channel_id: str) -> Offer | None:
        for offer in self.offers.list_offers(OfferStatus.ASSIGNED):
            if offer.assigned_driver_id == channel_id:
                return offer
        return None

    def _retire(self, offer_id: str) -> None:
        self._audience.pop(offer_id, None)
        self._retired[offer_id] = None
        while len(self._retired) > RETIRED_MEMORY:
            self._retired.popitem(last=False)
