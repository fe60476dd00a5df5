from __future__ import annotations
import discord
from ..data.models import Offer
from ..dispatch.service import DispatchService
from .messages import driver_earnings

class PendingOffersView(discord.ui.View):
    """One "Accept" button per offer the driver can still take."""

    def __init__(self, service: DispatchService, offers: list[Offer]) -> None:
        super().__init__(timeout=300)
        self.service = service
        for offer in offers[:25]:
            b = discord.ui.Button(
                label=f"Accept {offer.id} (${driver_earnings(offer.price_quote)})",
                style=discord.ButtonStyle.success,
            )

            async def handler(inter: discord.Interaction, offer_id: str = offer.id) -> None:
                await self._accept(inter, offer_id)

            b.callback = handler
            self.add_item(b)

    async def _accept(self, interaction: discord.Interaction, offer_id: str) -> None:
        reply = await self.service.accept(str(interaction.user.id), offer_id)
        await interaction.response.send_message(reply, ephemeral=True)


def offers_embed(offers: list[Offer]) -> discord.Embed:
    embed = discord.Embed(title="Available rides")
    for offer in offers[:25]:
        embed.add_field(
            name=f"{offer.id}: {offer.origin} → {offer.destination}",
            value=(
                f"Type: {offer.category} | Weight: {offer.weight}\n"
                f"Distance: {offer.distance_km:g} km | "
                f"Earnings: ${driver_earnings(offer.price_quote)}"
            ),
            inline=False,
        )
    return embed
