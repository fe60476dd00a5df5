"""Persisted records for drivers and rides.

The models are implemented using :mod:`pydantic` so that they provide
runtime validation and convenient serialisation to and from dictionaries.
They are the durable mirror of what the dispatch coordinator keeps in
memory; the coordinator never reads them back while running.
"""

from __future__ import annotations

import datetime
from datetime import UTC

from pydantic import BaseModel, Field, field_validator

MIN_NAME_LENGTH = 2
MIN_PLATE_LENGTH = 4


def _now_iso() -> str:
    return datetime.datetime.now(tz=UTC).isoformat()


class Driver(BaseModel):
    """A registered driver reachable over the chat platform.

    Attributes
    ----------
    channel_id:
        Stable messaging identity of the driver. Used as the unique key.
    display_name:
        Name collected during onboarding (at least two characters).
    plate_number:
        Vehicle plate collected during onboarding (at least four characters).
    registered_at:
        ISO timestamp of the registration.

    """

    channel_id: str
    display_name: str
    plate_number: str
    registered_at: str = Field(default_factory=_now_iso)

    @field_validator("channel_id", mode="before")
    @classmethod
    def _channel_as_str(cls, value: object) -> str:
        return str(value)

    @field_validator("display_name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        value = value.strip()
        if len(value) < MIN_NAME_LENGTH:
            raise ValueError("Name too short")
        return value

    @field_validator("plate_number")
    @classmethod
    def _check_plate(cls, value: str) -> str:
        value = value.strip()
        if len(value) < MIN_PLATE_LENGTH:
            raise ValueError("Invalid plate")
        return value


class RideRecord(BaseModel):
    """Audit copy of a dispatched offer and what happened to it."""

    id: str
    requester_id: str
    origin: str
    destination: str
    price_quote: str
    status: str = "pending"  # pending | en-curso | completado | expirado
    driver_name: str | None = None
    plate: str | None = None
    driver_channel_id: str | None = None
    updated_at: str = Field(default_factory=_now_iso)
