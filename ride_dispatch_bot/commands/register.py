"""Registration of slash commands for the bot."""

from __future__ import annotations

import discord
from discord.ext import commands

from ..dispatch.service import DispatchService
from ..onboarding import OnboardingWizard
from ..ui.modals import RegistrationModal
from ..ui.views import PendingOffersView, offers_embed


def register_commands(
    bot: commands.Bot, service: DispatchService, wizard: OnboardingWizard
) -> None:
    """Register the driver-facing slash commands on ``bot.tree``."""
    tree = bot.tree
    coordinator = service.coordinator

    @tree.command(name="start", description="Sign up as a driver")
    async def start(interaction: discord.Interaction) -> None:
        prompt = wizard.start(str(interaction.user.id))
        await interaction.response.send_message(
            f"{prompt}\n(Reply in a direct message to this bot.)", ephemeral=True
        )

    @tree.command(name="register", description="Sign up as a driver with a form")
    async def register(interaction: discord.Interaction) -> None:
        await interaction.response.send_modal(RegistrationModal(wizard))

    @tree.command(name="offers", description="List rides you can still accept")
    async def offers(interaction: discord.Interaction) -> None:
        pending = coordinator.pending_for(str(interaction.user.id))
        if not pending:
            await interaction.response.send_message(
                "❌ There are no rides available.", ephemeral=True
            )
            return
        await interaction.response.send_message(
            embed=offers_embed(pending),
            view=PendingOffersView(service, pending),
            ephemeral=True,
        )

    @tree.command(name="accept", description="Take a ride")
    @discord.app_commands.describe(offer_id="Ride identifier")
    async def accept(interaction: discord.Interaction, offer_id: str) -> None:
        reply = await service.accept(str(interaction.user.id), offer_id.strip())
        await interaction.response.send_message(reply, ephemeral=True)

    if hasattr(accept, "autocomplete"):
        @accept.autocomplete("offer_id")
        async def accept_offer_id_autocomplete(
            interaction: discord.Interaction, current: str
        ) -> list[discord.app_commands.Choice[str]]:
            current_lower = current.lower()
            return [
                discord.app_commands.Choice(
                    name=f"{o.id}: {o.origin} → {o.destination}"[:100], value=o.id
                )
                for o in coordinator.pending_for(str(interaction.user.id))
                if current_lower in o.id.lower()
            ][:25]

    @tree.command(name="terminate", description="Mark your ride as completed")
    @discord.app_commands.describe(offer_id="Ride identifier (defaults to your active ride)")
    async def terminate(
        interaction: discord.Interaction, offer_id: str | None = None
    ) -> None:
        reply = await service.terminate(
            str(interaction.user.id), offer_id.strip() if offer_id else None
        )
        await interaction.response.send_message(reply, ephemeral=True)
