"""Tests for :mod:`ride_dispatch_bot.messaging.gateway`."""

import asyncio
import dataclasses
from decimal import Decimal

import httpx
import pytest

from ride_dispatch_bot.adapters.base import Adapter
from ride_dispatch_bot.core.directory import DriverDirectory
from ride_dispatch_bot.core.storage import JSONStorage
from ride_dispatch_bot.data.models import (
    CompletionIntent,
    DecisionIntent,
    ExpiryIntent,
    LostIntent,
    NotifyIntent,
    Offer,
)
from ride_dispatch_bot.messaging.gateway import MessagingGateway


class RecordingAdapter(Adapter):
    def __init__(self, fail_for=()):
        self.sent = []
        self.fail_for = set(fail_for)

    async def send_message(self, channel_id, content):  # pragma: no cover - unused
        self.sent.append((channel_id, content))

    async def send_direct_message(self, user_id, content):
        if user_id in self.fail_for:
            request = httpx.Request("POST", "https://discord.com/api/users/@me/channels")
            raise httpx.HTTPStatusError(
                "forbidden", request=request, response=httpx.Response(403, request=request)
            )
        self.sent.append((user_id, content))


OFFER = Offer(
    id="R7",
    requester_id="u1",
    origin="Norte",
    destination="Sur",
    weight="1kg",
    category="moto",
    price_quote=Decimal("20"),
    distance_km=3,
)


def test_render_each_intent(tmp_path):
    directory = DriverDirectory(JSONStorage(tmp_path / "data.json"))
    directory.add_driver("A", "Ana", "ANA-001")
    gateway = MessagingGateway(RecordingAdapter(), directory, admin_contact="123")

    assert "New ride available" in gateway.render(NotifyIntent("A", OFFER))
    decision = gateway.render(DecisionIntent("A", OFFER))
    assert "You accepted ride `R7`" in decision and "Ana" in decision
    assert "already taken" in gateway.render(LostIntent("B", "R7"))
    assert "completed" in gateway.render(CompletionIntent("A", OFFER))
    assert "no longer available" in gateway.render(ExpiryIntent("A", "R7"))

    with pytest.raises(TypeError):
        gateway.render(object())


def test_decision_without_directory_omits_name():
    gateway = MessagingGateway(RecordingAdapter())
    assert "Thank you" not in gateway.render(DecisionIntent("A", OFFER))


def test_deliver_all_counts_failures():
    adapter = RecordingAdapter(fail_for={"B"})
    gateway = MessagingGateway(adapter)
    intents = [LostIntent(c, "R7") for c in ("A", "B", "C")]

    failures = asyncio.run(gateway.deliver_all(intents))

    assert failures == 1
    assert [c for c, _ in adapter.sent] == ["A", "C"]


def test_render_failure_does_not_stop_fan_out(monkeypatch):
    from decimal import InvalidOperation

    from ride_dispatch_bot.ui import messages

    adapter = RecordingAdapter()
    gateway = MessagingGateway(adapter)
    original = messages.format_offer

    def format_offer(offer, admin_contact):
        if offer.id == "BAD":
            raise InvalidOperation("unpriceable")
        return original(offer, admin_contact)

    monkeypatch.setattr(messages, "format_offer", format_offer)
    bad = dataclasses.replace(OFFER, id="BAD")
    intents = [NotifyIntent("A", bad), NotifyIntent("B", OFFER)]

    failures = asyncio.run(gateway.deliver_all(intents))

    assert failures == 1
    assert [c for c, _ in adapter.sent] == ["B"]


def test_malformed_dm_channel_response_counts_as_failure():
    from ride_dispatch_bot.adapters.discord import DiscordAdapter

    def handler(request: httpx.Request) -> httpx.Response:
        if "/users/" in request.url.path:
            recipient = request.read().decode()
            if '"A"' in recipient:
                return httpx.Response(200, json={})
            return httpx.Response(200, json={"id": 900})
        return httpx.Response(200, json={"id": "msg"})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    gateway = MessagingGateway(DiscordAdapter("TOKEN", client=client))
    intents = [LostIntent(c, "R7") for c in ("A", "B")]

    async def scenario():
        try:
            return await gateway.deliver_all(intents)
        finally:
            await client.aclose()

    assert asyncio.run(scenario()) == 1
