from __future__ import annotations
import discord
from ..logging_config import get_logger
from ..onboarding import TECHNICAL_ERROR, InvalidDriverDetails, OnboardingWizard

logger = get_logger("modals")


class RegistrationModal(discord.ui.Modal, title="Driver Registration"):
    def __init__(self, wizard: OnboardingWizard) -> None:
        super().__init__()
        self.wizard = wizard
        self.name_input = discord.ui.TextInput(
            label="Full name",
            placeholder="Your full name",
            required=True,
            min_length=2,
            max_length=100,
        )
        self.plate_input = discord.ui.TextInput(
            label="Vehicle plate",
            placeholder="ABC-1234",
            required=True,
            min_length=4,
            max_length=20,
        )
        self.add_item(self.name_input)
        self.add_item(self.plate_input)

    async def on_submit(self, interaction: discord.Interaction) -> None:
        try:
            reply = self.wizard.complete(
                str(interaction.user.id), self.name_input.value, self.plate_input.value
            )
        except InvalidDriverDetails as err:
            reply = f"❌ {err}"
        except OSError:
            logger.exception("Saving driver %s failed", interaction.user.id)
            reply = TECHNICAL_ERROR
        await interaction.response.send_message(reply, ephemeral=True)
