from __future__ import annotations

import asyncio

import uvicorn

from .adapters.discord import DiscordAdapter
from .bot import DispatchBot, attach_service
from .commands.register import register_commands
from .config import load_settings
from .core.directory import DriverDirectory
from .core.storage import JSONStorage
from .dispatch.coordinator import DispatchCoordinator
from .dispatch.service import DispatchService
from .ingress import create_app
from .logging_config import setup_logging
from .messaging.gateway import MessagingGateway
from .messaging.push import PushNotifier
from .onboarding import OnboardingWizard


def main() -> int:
    settings = load_settings()
    log = setup_logging(settings.log_level)
    if not settings.token:
        log.error(
            "DISCORD_BOT_TOKEN is not set. "
            "Export it in your environment before running."
        )
        return 2
    try:
        storage = JSONStorage(settings.data_path)
    except (OSError, ValueError):
        log.exception("Could not load %s", settings.data_path)
        return 1

    directory = DriverDirectory(storage)
    adapter = DiscordAdapter(settings.token)
    push = PushNotifier(settings.push_url)
    service = DispatchService(
        DispatchCoordinator(directory),
        MessagingGateway(adapter, directory, settings.admin_contact),
        storage=storage,
        push=push,
        offer_ttl_seconds=settings.offer_ttl_seconds,
    )
    wizard = OnboardingWizard(directory)
    bot = DispatchBot(wizard=wizard)
    attach_service(service)
    register_commands(bot, service, wizard)

    server = uvicorn.Server(
        uvicorn.Config(
            create_app(service, storage),
            host=settings.ingress_host,
            port=settings.ingress_port,
            log_level="info",
        )
    )

    async def runner():
        try:
            async with bot:
                await asyncio.gather(bot.start(settings.token), server.serve())
        except KeyboardInterrupt:
            log.info("Shutting down...")
        finally:
            await adapter.close()
            await push.close()
        return 0

    return asyncio.run(runner())


if __name__ == "__main__":
    raise SystemExit(main())
