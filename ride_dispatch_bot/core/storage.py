"""Simple JSON-backed storage for drivers, rides and requester phones."""

from __future__ import annotations

import json
import os
from collections.abc import Iterable
from pathlib import Path

from .models import Driver, RideRecord, _now_iso


class JSONStorage:
    """Persist :class:`Driver` and :class:`RideRecord` data.

    The storage is intentionally lightweight. Data is persisted to a single
    JSON file on every mutation which keeps the implementation simple while
    providing durability across process restarts. It is a write-through
    mirror: the dispatch coordinator owns the live state of pending offers.
    """

    def __init__(self, path: Path) -> None:
        """Initialise storage using JSON file at ``path``."""
        self.path = Path(path)
        self._drivers: dict[str, Driver] = {}
        self._rides: dict[str, RideRecord] = {}
        self._phones: dict[str, str] = {}
        if self.path.exists():
            self._load()
        else:
            self._save()

    # ------------------------------------------------------------------
    # Internal helpers
    def _load(self) -> None:
        data = json.loads(self.path.read_text(encoding="utf-8"))
        self._drivers = {
            item["channel_id"]: Driver(**item) for item in data.get("drivers", [])
        }
        self._rides = {item["id"]: RideRecord(**item) for item in data.get("rides", [])}
        self._phones = {str(k): str(v) for k, v in data.get("phones", {}).items()}

    def _save(self) -> None:
        data = {
            "drivers": [d.model_dump() for d in self._drivers.values()],
            "rides": [r.model_dump() for r in self._rides.values()],
            "phones": self._phones,
        }
        tmp = str(self.path) + ".tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(tmp, self.path)

    # ------------------------------------------------------------------
    # Driver operations
    def add_driver(self, driver: Driver) -> None:
        """Persist ``driver``, replacing any entry for the same channel."""
        self._drivers[driver.channel_id] = driver
        self._save()

    def get_driver(self, channel_id: str) -> Driver | None:
        """Retrieve a driver by their messaging channel id."""
        return self._drivers.get(str(channel_id))

    def all_drivers(self) -> Iterable[Driver]:
        """Return an iterable of all stored drivers."""
        return self._drivers.values()

    # ------------------------------------------------------------------
    # Ride operations
    def upsert_ride(self, record: RideRecord) -> None:
        self._rides[record.id] = record
        self._save()

    def update_ride(self, ride_id: str, **changes: str | None) -> RideRecord | None:
        """Apply ``changes`` to a stored ride. Unknown rides yield ``None``."""
        record = self._rides.get(ride_id)
        if record is None:
            return None
        updated = record.model_copy(update={**changes, "updated_at": _now_iso()})
        self._rides[ride_id] = updated
        self._save()
        return updated

    def get_ride(self, ride_id: str) -> RideRecord | None:
        return self._rides.get(ride_id)

    # ------------------------------------------------------------------
    # Requester phones
    def set_phone(self, requester_id: str, phone: str) -> None:
        self._phones[str(requester_id)] = phone
        self._save()

    def phone_for(self, requester_id: str) -> str | None:
        """Look up the phone number registered for ``requester_id``."""
        return self._phones.get(str(requester_id))
