"""Expected, recoverable dispatch outcomes.

Each error carries the message shown to the driver. None of them is fatal;
the service layer turns them into chat replies.
"""

from __future__ import annotations


class DispatchError(Exception):
    """Base class for every refusal the coordinator can return."""

    message = "The request could not be completed."

    def __init__(self, offer_id: str | None = None, message: str | None = None) -> None:
        self.offer_id = offer_id
        if message is not None:
            self.message = message
        super().__init__(self.message if offer_id is None else f"{self.message} ({offer_id})")


class DuplicateOffer(DispatchError):
    message = "This ride was already dispatched."


class UnknownOffer(DispatchError):
    message = "❌ There is no such ride available."


class UnregisteredDriver(DispatchError):
    message = "❌ You are not registered. Use /start to sign up."


class NotNotified(DispatchError):
    message = "❌ This ride was not offered to you."


class AlreadyTaken(DispatchError):
    message = "❌ The ride was already taken."


class NotOwnerOrNotActive(DispatchError):
    message = "❌ You have no ride in progress."
