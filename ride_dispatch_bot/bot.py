"""Discord bot through which drivers receive and take rides.

Drivers talk to the bot with slash commands and buttons; sign-up can also
happen as a plain direct-message conversation after ``/start``. A background
loop withdraws offers nobody accepted within the configured time.
"""

from __future__ import annotations

from typing import Any

import discord
from discord.ext import commands, tasks

from .dispatch.service import DispatchService
from .logging_config import setup_logging
from .onboarding import OnboardingWizard


class DispatchBot(commands.Bot):
    """Small ``discord.py`` based bot used for ride dispatch."""

    background_task: tasks.Loop | None

    def __init__(self, **kwargs: Any) -> None:  # pragma: no cover - trivial
        """Initialize the bot with the minimal intents required."""
        wizard = kwargs.pop("wizard", None)
        intents = kwargs.pop("intents", None) or discord.Intents.default()
        # Slash commands and DMs only; guild message content is not needed.
        intents.message_content = False
        super().__init__(
            command_prefix=kwargs.pop("command_prefix", "!"),
            intents=intents,
        )
        self.log = setup_logging()
        self.background_task = None
        self.wizard: OnboardingWizard | None = wizard

    async def setup_hook(self) -> None:
        """Start the expiry sweep and sync slash commands."""
        self.background_task = tasks.loop(seconds=60.0, reconnect=True)(
            _expire_stale_offers
        )
        self.background_task.start(self)

        tree = getattr(self, "tree", None)
        if tree is not None:  # pragma: no cover - exercised in integration
            await tree.sync()

        await super().setup_hook()

    async def on_ready(self) -> None:  # pragma: no cover - requires discord
        """Log a short confirmation once the bot connected successfully."""
        await self.change_presence(activity=discord.Game(name="Dispatching rides"))
        self.log.info(
            "Logged in as %s (%s)",
            self.user,
            self.user.id if self.user else "?",
        )

    async def on_message(self, message: Any) -> None:
        """Feed direct messages to the sign-up wizard."""
        if getattr(message.author, "bot", False) or message.guild is not None:
            return
        if self.wizard is None:
            return
        reply = self.wizard.handle(str(message.author.id), message.content)
        if reply:
            await message.channel.send(reply)


class _ServiceHolder:
    """Simple indirection so the service can be attached after creation."""

    service: DispatchService | None = None


SERVICE_HOLDER = _ServiceHolder()


def attach_service(service: DispatchService) -> None:
    """Attach a service so background tasks can access it."""
    SERVICE_HOLDER.service = service


async def _expire_stale_offers(bot: DispatchBot) -> None:
    """Background task withdrawing offers that waited too long."""
    service = SERVICE_HOLDER.service
    if not service:
        return
    try:
        expired = await service.expire_stale()
    except Exception:  # pragma: no cover - keep the loop alive
        bot.log.exception("Expiry sweep failed")
        return
    if expired:
        bot.log.info("Expired %d stale offers", expired)


__all__ = [
    "DispatchBot",
    "attach_service",
    "_expire_stale_offers",
]
