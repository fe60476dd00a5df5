"""Outbound delivery: chat messages and requester push notifications."""

from .gateway import MessagingGateway
from .push import PushNotifier

__all__ = ["MessagingGateway", "PushNotifier"]
