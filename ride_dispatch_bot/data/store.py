"""In-memory registry of live offers."""

from __future__ import annotations

import dataclasses
import threading

from ..dispatch.errors import DuplicateOffer
from .models import LEGAL_TRANSITIONS, Offer, OfferStatus, Transition


class OfferStore:
    """Pending and assigned offers keyed by offer id.

    Every state change goes through :meth:`compare_and_transition`, which
    checks the current status and applies the new one under a single lock.
    Readers only ever receive copies.
    """

    def __init__(self) -> None:
        self._offers: dict[str, Offer] = {}
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Insertion / removal
    # ------------------------------------------------------------------
    def put(self, offer: Offer) -> Offer:
        """Insert ``offer`` as OFFERED and return the stored copy."""
        stored = dataclasses.replace(
            offer, status=OfferStatus.OFFERED, assigned_driver_id=None
        )
        with self._lock:
            if stored.id in self._offers:
                raise DuplicateOffer(stored.id)
            self._offers[stored.id] = stored
            return dataclasses.replace(stored)

    def remove(self, offer_id: str) -> Offer | None:
        with self._lock:
            return self._offers.pop(offer_id, None)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get(self, offer_id: str) -> Offer | None:
        with self._lock:
            offer = self._offers.get(offer_id)
            return dataclasses.replace(offer) if offer else None

    def list_offers(self, status: OfferStatus | None = None) -> list[Offer]:
        with self._lock:
            return [
                dataclasses.replace(o)
                for o in self._offers.values()
                if status is None or o.status is status
            ]

    def __contains__(self, offer_id: object) -> bool:
        with self._lock:
            return offer_id in self._offers

    def __len__(self) -> int:
        with self._lock:
            return len(self._offers)

    # ------------------------------------------------------------------
    # The mutation primitive
    # ------------------------------------------------------------------
    def compare_and_transition(
        self,
        offer_id: str,
        expected: OfferStatus,
        new: OfferStatus,
        driver_id: str | None = None,
    ) -> Transition:
        """Move ``offer_id`` from ``expected`` to ``new`` if it is still there.

        Returns ``Transition.CONFLICT`` when the current status differs from
        ``expected``; nothing is changed in that case.
        """
        if LEGAL_TRANSITIONS.get(expected) is not new:
            raise ValueError(f"illegal transition {expected.value} -> {new.value}")
        if new is OfferStatus.ASSIGNED and not driver_id:
            raise ValueError("a driver is required to assign an offer")

        with self._lock:
            offer = self._offers.get(offer_id)
            if offer is None:
                return Transition.NOT_FOUND
            if offer.status is not expected:
                return Transition.CONFLICT
            offer.status = new
            if new is OfferStatus.ASSIGNED:
                offer.assigned_driver_id = str(driver_id)
            return Transition.OK
