"""Chat texts for offers and their outcomes."""

from __future__ import annotations

import re
from decimal import ROUND_HALF_UP, Decimal

from ..data.models import Offer, Stop

PLATFORM_FEE = Decimal("5.28")
DRIVER_SHARE = Decimal("0.7")


def driver_earnings(price_quote: Decimal) -> Decimal:
    """What the driver keeps from ``price_quote``, rounded to cents.

    A non-finite quote yields zero earnings.
    """
    price = Decimal(price_quote)
    if not price.is_finite():
        return Decimal("0.00")
    earnings = (price - PLATFORM_FEE) * DRIVER_SHARE
    return earnings.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def whatsapp_link(phone: str | None) -> str | None:
    if not phone:
        return None
    digits = re.sub(r"[^\d]", "", phone)
    return f"https://wa.me/{digits}" if digits else None


def format_stops(stops: tuple[Stop, ...]) -> str:
    if not stops:
        return "None"
    return "\n".join(
        f"{index}. 📍 Address: {stop.address}\n   ✏️ Notes: {stop.note or 'None'}"
        for index, stop in enumerate(stops, start=1)
    )


def format_offer(offer: Offer, admin_contact: str) -> str:
    """Render the announcement every driver receives for a new offer."""
    phone_link = whatsapp_link(offer.requester_phone)
    admin_link = f"https://wa.me/{admin_contact}"
    lines = [
        "🆕 **New ride available**",
        "",
        f"🆔 Ride: `{offer.id}`",
        f"🧍 Requester: {offer.requester_id}",
        f"📞 Phone: {offer.requester_phone or 'Not available'}",
        f"🛣️ From: {offer.origin}",
        f"🏁 To: {offer.destination}",
        f"📦 Weight: {offer.weight}",
        f"🚚 Type: {offer.category}",
        f"💬 Drop-off notes: {offer.indications or 'None'}",
        f"📏 Distance: {offer.distance_km:g} km",
        f"💵 Earnings: ${driver_earnings(offer.price_quote)}",
        "",
        "🛑 Stops:",
        format_stops(offer.stops),
        "",
    ]
    if phone_link:
        lines.append(f"[📨 Send delivery confirmation]({phone_link})")
    lines.append(f"[📦 Proof of delivery for payment]({admin_link})")
    lines += [
        "",
        f"Reply with `/accept {offer.id}` to take this ride.",
        "When the ride is over, reply with `/terminate`.",
    ]
    return "\n".join(lines)


def format_decision(offer: Offer, driver_name: str | None = None) -> str:
    thanks = f" Thank you, {driver_name}." if driver_name else ""
    return f"✅ You accepted ride `{offer.id}`!{thanks}\n🛣️ {offer.origin} → 🏁 {offer.destination}"


def format_lost(offer_id: str) -> str:
    return f"❌ Ride `{offer_id}` was already taken."


def format_completion(offer: Offer) -> str:
    return f"✅ Ride `{offer.id}` marked as completed. Thank you!"


def format_expiry(offer_id: str) -> str:
    return f"⌛ Ride `{offer_id}` is no longer available."


def format_already_yours(offer: Offer) -> str:
    return f"ℹ️ Ride `{offer.id}` is already assigned to you."
