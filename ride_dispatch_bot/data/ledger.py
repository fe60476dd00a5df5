"""Which driver was told about which offer."""

from __future__ import annotations

import threading


class NotificationLedger:
    """Per-driver set of notified offer ids.

    Acceptance is only allowed for offers recorded here, so the ledger is
    also the gate that keeps a driver from accepting an offer before the
    dispatch that announced it has finished.
    """

    def __init__(self) -> None:
        self._by_channel: dict[str, set[str]] = {}
        self._lock = threading.Lock()

    def record_notified(self, channel_id: str, offer_id: str) -> None:
        with self._lock:
            self._by_channel.setdefault(str(channel_id), set()).add(offer_id)

    def is_notified(self, channel_id: str, offer_id: str) -> bool:
        with self._lock:
            return offer_id in self._by_channel.get(str(channel_id), ())

    def offers_for(self, channel_id: str) -> set[str]:
        with self._lock:
            return set(self._by_channel.get(str(channel_id), ()))

    def clear_offer(self, offer_id: str) -> set[str]:
        """Drop ``offer_id`` everywhere; return the channels that held it."""
        holders: set[str] = set()
        with self._lock:
            for channel_id, offers in list(self._by_channel.items()):
                if offer_id in offers:
                    offers.discard(offer_id)
                    holders.add(channel_id)
                    if not offers:
                        del self._by_channel[channel_id]
        return holders
