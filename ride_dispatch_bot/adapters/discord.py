"""Discord adapter implementing the :class:`~ride_dispatch_bot.adapters.base.Adapter`.

Drivers are addressed by their Discord user id. The adapter uses
:mod:`httpx` to talk to Discord's HTTP API, so outbound offers can be sent
from anywhere (including the ingress) without going through the gateway
connection of the bot.
"""

from __future__ import annotations

from typing import Any

import httpx

from .base import Adapter


class DiscordAdapter(Adapter):
    """Adapter that sends requests directly to the Discord HTTP API."""

    api_base = "https://discord.com/api"

    def __init__(self, token: str, client: httpx.AsyncClient | None = None) -> None:
        """Store authentication ``token`` and optional HTTP ``client``."""
        self.token = token
        self.client = client or httpx.AsyncClient()
        self._dm_channels: dict[str, str] = {}

    @property
    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bot {self.token}"}

    # ------------------------------------------------------------------
    async def send_message(self, channel_id: str, content: str) -> None:
        """Send a message to a channel.

        Parameters
        ----------
        channel_id:
            Identifier of the Discord channel.
        content:
            Message body to send. Discord renders Markdown natively.

        """
        url = f"{self.api_base}/channels/{channel_id}/messages"
        payload = {"content": content}
        response = await self.client.post(url, json=payload, headers=self._headers)
        response.raise_for_status()

    async def open_dm_channel(self, user_id: str) -> str:
        """Return the DM channel id for ``user_id``, creating it if needed."""
        user_id = str(user_id)
        cached = self._dm_channels.get(user_id)
        if cached:
            return cached
        url = f"{self.api_base}/users/@me/channels"
        response = await self.client.post(
            url, json={"recipient_id": user_id}, headers=self._headers
        )
        response.raise_for_status()
        data: dict[str, Any] = response.json()
        channel_id = str(data["id"])
        self._dm_channels[user_id] = channel_id
        return channel_id

    async def send_direct_message(self, user_id: str, content: str) -> None:
        channel_id = await self.open_dm_channel(user_id)
        await self.send_message(channel_id, content)

    async def close(self) -> None:
        """Close the underlying :class:`httpx.AsyncClient`."""
        await self.client.aclose()
