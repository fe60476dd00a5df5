"""Driver directory backed by :class:`JSONStorage`."""

from __future__ import annotations

import threading

from pydantic import ValidationError

from .models import MIN_NAME_LENGTH, MIN_PLATE_LENGTH, Driver
from .storage import JSONStorage


class InvalidDriverDetails(ValueError):
    """Raised when onboarding data does not meet the minimum lengths."""


def validate_driver_details(display_name: str, plate_number: str) -> tuple[str, str]:
    """Return the stripped ``(name, plate)`` or raise :class:`InvalidDriverDetails`."""
    name = display_name.strip()
    plate = plate_number.strip()
    if len(name) < MIN_NAME_LENGTH:
        raise InvalidDriverDetails("Name too short")
    if len(plate) < MIN_PLATE_LENGTH:
        raise InvalidDriverDetails("Invalid plate")
    return name, plate


class DriverDirectory:
    """Authoritative list of known drivers.

    Read by the dispatch coordinator, written only by onboarding. Readers
    see an in-memory copy and never wait for a registration to reach disk.
    """

    def __init__(self, storage: JSONStorage) -> None:
        self.storage = storage
        self._lock = threading.Lock()
        # serialises file writes; never held together with ``_lock``
        self._write_lock = threading.Lock()
        self._drivers: dict[str, Driver] = {
            d.channel_id: d for d in storage.all_drivers()
        }

    def list_drivers(self) -> list[Driver]:
        """Snapshot of every registered driver."""
        with self._lock:
            return list(self._drivers.values())

    def find_by_channel(self, channel_id: str) -> Driver | None:
        with self._lock:
            return self._drivers.get(str(channel_id))

    def add_driver(
        self, channel_id: str, display_name: str, plate_number: str
    ) -> Driver:
        """Register (or re-register) the driver behind ``channel_id``.

        The driver becomes visible only once it was persisted; an
        ``OSError`` from the write leaves the directory unchanged.
        """
        name, plate = validate_driver_details(display_name, plate_number)
        try:
            driver = Driver(
                channel_id=str(channel_id), display_name=name, plate_number=plate
            )
        except ValidationError as exc:  # pragma: no cover - guarded above
            raise InvalidDriverDetails(str(exc)) from exc
        with self._write_lock:
            self.storage.add_driver(driver)
        with self._lock:
            self._drivers[driver.channel_id] = driver
        return driver

    def __len__(self) -> int:
        with self._lock:
            return len(self._drivers)
