"""Best-effort push notifications to requesters."""

from __future__ import annotations

import httpx

from ..logging_config import get_logger

logger = get_logger("push")


class PushNotifier:
    """Post requester notifications to an HTTP webhook.

    Failures are logged and reported through the return value; they never
    propagate, so a broken push backend cannot undo a ride transition.
    """

    def __init__(self, url: str = "", client: httpx.AsyncClient | None = None) -> None:
        self.url = url
        self.client = client or httpx.AsyncClient(timeout=10.0)

    async def notify(self, requester_id: str, title: str, body: str) -> bool:
        if not self.url:
            logger.debug("Push disabled; dropping %r for %s", title, requester_id)
            return False
        payload = {"user_id": requester_id, "title": title, "body": body}
        try:
            response = await self.client.post(self.url, json=payload)
            response.raise_for_status()
        except httpx.HTTPError:
            logger.exception("Push notification to %s failed", requester_id)
            return False
        return True

    async def close(self) -> None:
        await self.client.aclose()
