"""Driver sign-up over chat: ask for a name, then a plate, then register."""

from __future__ import annotations

from dataclasses import dataclass

from .core.directory import DriverDirectory, InvalidDriverDetails, validate_driver_details
from .core.models import MIN_NAME_LENGTH, MIN_PLATE_LENGTH
from .logging_config import get_logger

logger = get_logger("onboarding")

ASKING_NAME = "asking_name"
ASKING_PLATE = "asking_plate"

WELCOME = "🚗 Welcome, driver! Please send your full name:"
ASK_PLATE = "✅ Now send your vehicle plate number:"
NAME_TOO_SHORT = "❌ Name too short"
INVALID_PLATE = "❌ Invalid plate"
TECHNICAL_ERROR = "❌ Technical error. Please try again."


@dataclass
class _Progress:
    step: str = ASKING_NAME
    name: str = ""


class OnboardingWizard:
    """Per-channel name → plate conversation."""

    def __init__(self, directory: DriverDirectory) -> None:
        self.directory = directory
        self._states: dict[str, _Progress] = {}

    def start(self, channel_id: str) -> str:
        self._states[str(channel_id)] = _Progress()
        return WELCOME

    def in_progress(self, channel_id: str) -> bool:
        return str(channel_id) in self._states

    def handle(self, channel_id: str, text: str) -> str | None:
        """Feed one message into the wizard.

        Returns the reply to send, or ``None`` if ``channel_id`` is not
        currently signing up.
        """
        channel_id = str(channel_id)
        state = self._states.get(channel_id)
        text = (text or "").strip()
        if state is None or not text:
            return None

        if state.step == ASKING_NAME:
            if len(text) < MIN_NAME_LENGTH:
                return NAME_TOO_SHORT
            state.name = text
            state.step = ASKING_PLATE
            return ASK_PLATE

        if len(text) < MIN_PLATE_LENGTH:
            return INVALID_PLATE
        try:
            return self.complete(channel_id, state.name, text)
        except OSError:
            logger.exception("Saving driver %s failed", channel_id)
            return TECHNICAL_ERROR

    def complete(self, channel_id: str, name: str, plate: str) -> str:
        """Register the driver in one step (used by the sign-up form)."""
        driver = self.directory.add_driver(channel_id, name, plate)
        self._states.pop(str(channel_id), None)
        logger.info("Driver %s registered (%s)", driver.channel_id, driver.plate_number)
        return f"🎉 Registration complete. Thank you, {driver.display_name}."


__all__ = [
    "InvalidDriverDetails",
    "OnboardingWizard",
    "validate_driver_details",
]
