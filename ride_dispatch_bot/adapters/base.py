"""Transport interface the messaging gateway writes to."""

from __future__ import annotations

from abc import ABC, abstractmethod


class Adapter(ABC):
    """Outbound side of a chat platform.

    Implementations raise ``httpx.HTTPError`` when the platform refuses a
    message; the gateway decides what a failed delivery means.
    """

    @abstractmethod
    async def send_message(self, channel_id: str, content: str) -> None:
        """Post ``content`` in a channel the bot can already write to."""

    @abstractmethod
    async def send_direct_message(self, user_id: str, content: str) -> None:
        """Send ``content`` privately to the driver behind ``user_id``."""

    async def close(self) -> None:
        """Release network resources. Nothing to do by default."""
