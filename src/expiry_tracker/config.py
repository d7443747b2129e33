"""Application configuration builder."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from datetime import time
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .db.db_init import init_db
from .notifications.notifications_models import EmailTarget, NotificationTarget, PushTarget


@dataclass(slots=True)
class OracleSettings:
    api_key: str
    api_url: str
    model: str
    max_tokens: int
    temperature: float
    timeout_seconds: float


@dataclass(slots=True)
class ImageSearchSettings:
    enabled: bool
    timeout_seconds: float


@dataclass(slots=True)
class EmailSettings:
    user: str
    password: str
    smtp_host: str
    smtp_port: int


@dataclass(slots=True)
class PushSettings:
    public_key: str
    private_key: str
    contact: str


@dataclass(slots=True)
class SweepSettings:
    enabled: bool
    fire_at: time
    targets: tuple[NotificationTarget, ...]


@dataclass(slots=True)
class AppConfig:
    database_url: str
    engine: Engine
    session_factory: sessionmaker[Session]
    listen_port: int
    oracle: OracleSettings
    image_search: ImageSearchSettings
    email: EmailSettings
    push: PushSettings
    sweep: SweepSettings


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


def parse_fire_time(raw: str) -> time:
    """Parse ``HH:MM`` into a :class:`datetime.time`."""
    try:
        hours, minutes = raw.strip().split(":", 1)
        return time(hour=int(hours), minute=int(minutes))
    except ValueError as exc:
        raise ValueError(f"SWEEP_TIME must look like HH:MM, got {raw!r}") from exc


def parse_email_targets(raw: str | None) -> list[EmailTarget]:
    if not raw:
        return []
    return [EmailTarget(address=item.strip()) for item in raw.split(",") if item.strip()]


PUSH_SUBSCRIPTIONS_SCHEMA: dict[str, Any] = {
    "type": "array",
    "items": {
        "type": "object",
        "required": ["endpoint", "keys"],
        "properties": {
            "endpoint": {"type": "string", "minLength": 1},
            "keys": {
                "type": "object",
                "required": ["p256dh", "auth"],
                "properties": {
                    "p256dh": {"type": "string", "minLength": 1},
                    "auth": {"type": "string", "minLength": 1},
                },
            },
        },
    },
}


def load_push_targets(path: str | None) -> list[PushTarget]:
    """Read push subscriptions from a JSON file holding a list of descriptors."""
    if not path:
        return []
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    validator = Draft202012Validator(PUSH_SUBSCRIPTIONS_SCHEMA)
    errors = sorted(validator.iter_errors(data), key=lambda err: list(err.path))
    if errors:
        first = errors[0]
        location = "/".join(str(part) for part in first.path) or "$"
        raise ValueError(
            f"Push subscription file {path} is invalid at {location}: {first.message}"
        )
    return [PushTarget.from_subscription(entry) for entry in data]


def load_config() -> AppConfig:
    """Load configuration from environment (SQLite by default)."""
    database_url = os.getenv("DATABASE_URL", "sqlite:///expiry.db")
    engine = create_engine(database_url, future=True)
    session_factory: sessionmaker[Session] = sessionmaker(bind=engine, expire_on_commit=False)

    oracle = OracleSettings(
        api_key=os.getenv("ORACLE_API_KEY", ""),
        api_url=os.getenv("ORACLE_API_URL", "https://api.openai.com/v1/completions"),
        model=os.getenv("ORACLE_MODEL", "gpt-3.5-turbo-instruct"),
        max_tokens=int(os.getenv("ORACLE_MAX_TOKENS", 10)),
        temperature=float(os.getenv("ORACLE_TEMPERATURE", 0.5)),
        timeout_seconds=float(os.getenv("ORACLE_TIMEOUT_SECONDS", 15)),
    )
    image_search = ImageSearchSettings(
        enabled=_env_flag("IMAGE_SEARCH_ENABLED", True),
        timeout_seconds=float(os.getenv("IMAGE_SEARCH_TIMEOUT_SECONDS", 20)),
    )
    email = EmailSettings(
        user=os.getenv("EMAIL_USER", ""),
        password=os.getenv("EMAIL_PASS", ""),
        smtp_host=os.getenv("EMAIL_SMTP_HOST", "smtp.gmail.com"),
        smtp_port=int(os.getenv("EMAIL_SMTP_PORT", 587)),
    )
    push = PushSettings(
        public_key=os.getenv("PUSH_PUBLIC_KEY", ""),
        private_key=os.getenv("PUSH_PRIVATE_KEY", ""),
        contact=os.getenv("PUSH_CONTACT", "mailto:admin@example.com"),
    )
    targets: list[NotificationTarget] = [
        *parse_email_targets(os.getenv("NOTIFY_EMAILS")),
        *load_push_targets(os.getenv("PUSH_SUBSCRIPTIONS_PATH")),
    ]
    sweep = SweepSettings(
        enabled=_env_flag("SWEEP_ENABLED", True),
        fire_at=parse_fire_time(os.getenv("SWEEP_TIME", "08:00")),
        targets=tuple(targets),
    )

    init_db(engine)

    return AppConfig(
        database_url=database_url,
        engine=engine,
        session_factory=session_factory,
        listen_port=int(os.getenv("LISTEN_PORT", 5001)),
        oracle=oracle,
        image_search=image_search,
        email=email,
        push=push,
        sweep=sweep,
    )
