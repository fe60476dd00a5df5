"""Async facade used by every transport (slash commands, buttons, ingress).

The service calls the synchronous coordinator, then, with the coordinator's
lock already released, delivers the resulting intents, mirrors the outcome
to persistence and pings the requester. Collaborator failures are logged
and never undo a transition.
"""

from __future__ import annotations

from ..core.models import RideRecord
from ..core.storage import JSONStorage
from ..data.models import Offer
from ..logging_config import get_logger
from ..messaging.gateway import MessagingGateway
from ..messaging.push import PushNotifier
from ..ui import messages
from .coordinator import DispatchCoordinator
from .errors import DispatchError

logger = get_logger("service")


class DispatchService:
    def __init__(
        self,
        coordinator: DispatchCoordinator,
        gateway: MessagingGateway,
        storage: JSONStorage | None = None,
        push: PushNotifier | None = None,
        offer_ttl_seconds: int = 0,
    ) -> None:
        self.coordinator = coordinator
        self.gateway = gateway
        self.storage = storage
        self.push = push
        self.offer_ttl_seconds = offer_ttl_seconds

    # ------------------------------------------------------------------
    async def offer_created(self, offer: Offer) -> int:
        """Dispatch a new offer; returns how many drivers were notified.

        Raises :class:`DuplicateOffer` when the ride was already dispatched.
        """
        intents = self.coordinator.dispatch(offer)
        self._mirror(
            offer.id,
            record=RideRecord(
                id=offer.id,
                requester_id=offer.requester_id,
                origin=offer.origin,
                destination=offer.destination,
                price_quote=str(offer.price_quote),
            ),
        )
        await self.gateway.deliver_all(intents)
        return len(intents)

    async def accept(self, channel_id: str, offer_id: str) -> str:
        """Handle a driver's acceptance and return the reply to show them."""
        try:
            result = self.coordinator.accept(channel_id, offer_id)
        except DispatchError as err:
            logger.info("Accept of %s by %s refused: %s", offer_id, channel_id, type(err).__name__)
            return err.message
        if result.already_assigned:
            return messages.format_already_yours(result.offer)

        # The winner's confirmation is returned as the reply; the other
        # intents go out as direct messages.
        decision, *others = result.intents
        await self.gateway.deliver_all(others)

        driver = self.coordinator.directory.find_by_channel(channel_id)
        self._mirror(
            offer_id,
            status="en-curso",
            driver_name=driver.display_name if driver else None,
            plate=driver.plate_number if driver else None,
            driver_channel_id=str(channel_id),
        )
        await self._push(
            result.offer.requester_id,
            "Ride accepted",
            f"A driver is on the way for ride {offer_id}.",
        )
        return self.gateway.render(decision)

    async def terminate(self, channel_id: str, offer_id: str | None = None) -> str:
        try:
            result = self.coordinator.terminate(channel_id, offer_id)
        except DispatchError as err:
            return err.message
        self._mirror(result.offer.id, status="completado")
        await self._push(
            result.offer.requester_id,
            "Ride completed",
            f"Ride {result.offer.id} has been completed.",
        )
        return self.gateway.render(result.intents[0])

    async def expire_stale(self) -> int:
        """Expire offers older than the configured TTL; returns how many."""
        if self.offer_ttl_seconds <= 0:
            return 0
        expired = self.coordinator.expire_stale(self.offer_ttl_seconds)
        for offer_id, intents in expired.items():
            self._mirror(offer_id, status="expirado")
            await self.gateway.deliver_all(intents)
        return len(expired)

    # ------------------------------------------------------------------
    def _mirror(self, offer_id: str, record: RideRecord | None = None, **changes) -> None:
        if self.storage is None:
            return
        try:
            if record is not None:
                self.storage.upsert_ride(record)
            else:
                self.storage.update_ride(offer_id, **changes)
        except OSError:
            logger.exception("Persisting ride %s failed", offer_id)

    async def _push(self, requester_id: str, title: str, body: str) -> None:
        if self.push is None:
            return
        await self.push.notify(requester_id, title, body)


__all__ = ["DispatchService"]
