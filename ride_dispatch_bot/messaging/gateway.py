"""Turn coordinator intents into chat messages."""

from __future__ import annotations

from collections.abc import Iterable

import httpx

from ..adapters.base import Adapter
from ..core.directory import DriverDirectory
from ..data.models import (
    CompletionIntent,
    DecisionIntent,
    ExpiryIntent,
    Intent,
    LostIntent,
    NotifyIntent,
)
from ..logging_config import get_logger
from ..ui import messages

logger = get_logger("gateway")


class MessagingGateway:
    """Format and deliver intents through an :class:`Adapter`.

    Delivery is at-least-once from the caller's point of view and never
    feeds back into dispatch state: a failed send is logged and counted.
    """

    def __init__(
        self,
        adapter: Adapter,
        directory: DriverDirectory | None = None,
        admin_contact: str = "527223711236",
    ) -> None:
        self.adapter = adapter
        self.directory = directory
        self.admin_contact = admin_contact

    def render(self, intent: Intent) -> str:
        if isinstance(intent, NotifyIntent):
            return messages.format_offer(intent.offer, self.admin_contact)
        if isinstance(intent, DecisionIntent):
            driver = self.directory.find_by_channel(intent.channel_id) if self.directory else None
            return messages.format_decision(
                intent.offer, driver.display_name if driver else None
            )
        if isinstance(intent, LostIntent):
            return messages.format_lost(intent.offer_id)
        if isinstance(intent, CompletionIntent):
            return messages.format_completion(intent.offer)
        if isinstance(intent, ExpiryIntent):
            return messages.format_expiry(intent.offer_id)
        raise TypeError(f"unsupported intent {type(intent).__name__}")

    async def deliver(self, intent: Intent) -> bool:
        """Send one intent. Returns ``False`` if it could not be sent.

        The offer is already dispatched when this runs, so a message that
        fails to render or a malformed platform response only costs this
        one delivery.
        """
        try:
            content = self.render(intent)
        except ArithmeticError:
            logger.exception(
                "Rendering %s for %s failed", type(intent).__name__, intent.channel_id
            )
            return False
        try:
            await self.adapter.send_direct_message(intent.channel_id, content)
        except (httpx.HTTPError, KeyError, ValueError):
            logger.exception(
                "Delivering %s to %s failed", type(intent).__name__, intent.channel_id
            )
            return False
        return True

    async def deliver_all(self, intents: Iterable[Intent]) -> int:
        """Deliver ``intents`` in order and return how many failed."""
        failures = 0
        for intent in intents:
            if not await self.deliver(intent):
                failures += 1
        return failures
