# agendabot/core/config_validation.py
from __future__ import annotations

import logging
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

log = logging.getLogger("agendabot.config")


def validate_config(cfg: Any) -> None:
    """Validate runtime configuration before starting the scheduler.

    Missing Telegram credentials are allowed (digest is built, not sent);
    everything else must be in range.
    """
    tz_name = getattr(cfg, "TIMEZONE", None)
    try:
        ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, TypeError, ValueError):
        raise ValueError(f"TIMEZONE '{tz_name}' is not a known IANA timezone") from None

    hour = getattr(cfg, "TRIGGER_HOUR", None)
    minute = getattr(cfg, "TRIGGER_MINUTE", None)
    if not isinstance(hour, int) or not 0 <= hour <= 23:
        raise ValueError(f"TRIGGER_HOUR must be 0..23, got {hour!r}")
    if not isinstance(minute, int) or not 0 <= minute <= 59:
        raise ValueError(f"TRIGGER_MINUTE must be 0..59, got {minute!r}")

    tick = getattr(cfg, "TICK_SECONDS", None)
    if not isinstance(tick, int) or tick <= 0:
        raise ValueError(f"TICK_SECONDS must be a positive integer, got {tick!r}")

    attempts = getattr(cfg, "DISPATCH_MAX_ATTEMPTS", None)
    if not isinstance(attempts, int) or attempts < 1:
        raise ValueError(f"DISPATCH_MAX_ATTEMPTS must be >= 1, got {attempts!r}")

    delay = getattr(cfg, "DISPATCH_RETRY_DELAY_S", None)
    if not isinstance(delay, (int, float)) or delay < 0:
        raise ValueError(f"DISPATCH_RETRY_DELAY_S must be >= 0, got {delay!r}")

    timeout = getattr(cfg, "DISPATCH_TIMEOUT_S", None)
    if not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ValueError(f"DISPATCH_TIMEOUT_S must be > 0, got {timeout!r}")

    # Worst-case send (every attempt times out) must finish before the next tick
    budget = (attempts - 1) * delay + attempts * timeout
    if budget >= tick:
        raise ValueError(
            "worst-case dispatch time must be below TICK_SECONDS "
            f"(({attempts} - 1) * {delay} + {attempts} * {timeout} = {budget} >= {tick})"
        )

    retention = getattr(cfg, "RECORD_RETENTION_DAYS", None)
    if not isinstance(retention, int) or retention < 1:
        raise ValueError(f"RECORD_RETENTION_DAYS must be >= 1, got {retention!r}")

    if not getattr(cfg, "DATABASE_URL", None):
        raise ValueError("DATABASE_URL must be set")

    token = getattr(cfg, "TELEGRAM_BOT_TOKEN", None)
    chat_id = getattr(cfg, "TELEGRAM_CHAT_ID", None)
    if bool(token) != bool(chat_id):
        log.warning(
            "TELEGRAM_BOT_TOKEN and TELEGRAM_CHAT_ID must both be set; dispatch is disabled"
        )
