"""HTTP ingress: the app backend posts newly created rides here."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .core.storage import JSONStorage
from .data.models import Offer, Stop
from .dispatch.errors import DuplicateOffer
from .dispatch.service import DispatchService
from .logging_config import get_logger

logger = get_logger("ingress")


class RidePayload(BaseModel):
    """Ride document as produced by the app backend."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(default="", alias="$id")
    user_id: str = ""
    start_point: str = Field(default="", alias="startPoint")
    end_point: str = Field(default="", alias="endPoint")
    ride_date: str = Field(default="", alias="rideDate")
    weight: str = ""
    type: str = ""
    indications: str = ""
    distance: float = 0.0
    price: str = "0"
    stops: list[str] = Field(default_factory=list)
    phone: str | None = None

    @field_validator("id", "user_id", "weight", "price", "phone", mode="before")
    @classmethod
    def _scalars_as_str(cls, value: Any) -> Any:
        # the backend sends numbers for some of these
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    def is_complete(self) -> bool:
        return bool(
            self.id.strip() and self.start_point and self.end_point and self.ride_date
        )

    def to_offer(self, phone: str | None = None) -> Offer:
        try:
            price = Decimal(str(self.price))
        except InvalidOperation:
            price = Decimal("0")
        if not price.is_finite():
            # "Infinity" and "NaN" parse but cannot be priced
            price = Decimal("0")
        return Offer(
            id=self.id.strip(),
            requester_id=self.user_id,
            origin=self.start_point,
            destination=self.end_point,
            weight=self.weight,
            category=self.type,
            price_quote=price,
            distance_km=self.distance,
            stops=tuple(Stop.parse(s) for s in self.stops),
            indications=self.indications,
            requester_phone=self.phone or phone,
            ride_date=self.ride_date,
        )


def _error(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"success": False, "error": message}, status_code=status_code)


def create_app(service: DispatchService, storage: JSONStorage | None = None) -> FastAPI:
    app = FastAPI(title="Ride dispatch ingress")

    @app.get("/", response_class=PlainTextResponse)
    async def health() -> str:
        return "Bot is running"

    @app.post("/rides")
    async def ride_created(request: Request) -> Any:
        try:
            body = await request.json()
        except ValueError:
            return _error("Invalid JSON body", 400)
        if not isinstance(body, dict):
            return _error("Incomplete ride data", 400)
        try:
            payload = RidePayload.model_validate(body)
        except ValidationError:
            return _error("Incomplete ride data", 400)
        if not payload.is_complete():
            return _error("Incomplete ride data", 400)

        phone = None
        if not payload.phone and storage is not None and payload.user_id:
            phone = storage.phone_for(payload.user_id)

        try:
            notified = await service.offer_created(payload.to_offer(phone))
        except DuplicateOffer:
            logger.info("Ride %s delivered again; ignoring", payload.id)
            return {"success": True, "duplicate": True}
        return {"success": True, "notified": notified}

    return app
