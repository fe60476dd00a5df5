import os
from dataclasses import dataclass


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    token: str
    data_path: str = "dispatch_data.json"
    # Offers still waiting for a driver after this long are expired; 0 disables
    offer_ttl_seconds: int = 1800
    push_url: str = ""
    ingress_host: str = "0.0.0.0"
    ingress_port: int = 8080
    admin_contact: str = "527223711236"
    log_level: str = "INFO"


def load_settings() -> Settings:
    token = os.getenv("DISCORD_BOT_TOKEN", "").strip()
    return Settings(
        token=token or "",
        data_path=os.getenv("DISPATCH_DATA_PATH", "").strip() or "dispatch_data.json",
        offer_ttl_seconds=max(0, _int_env("OFFER_TTL_SECONDS", 1800)),
        push_url=os.getenv("PUSH_WEBHOOK_URL", "").strip(),
        ingress_host=os.getenv("INGRESS_HOST", "").strip() or "0.0.0.0",
        ingress_port=_int_env("INGRESS_PORT", 8080),
        admin_contact=os.getenv("ADMIN_CONTACT", "").strip() or "527223711236",
        log_level=os.getenv("LOG_LEVEL", "").strip().upper() or "INFO",
    )
