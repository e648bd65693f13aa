# agendabot/core/quotes.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from functools import lru_cache
from pathlib import Path

import yaml

from agendabot.core.clock import parse_target_date

logger = logging.getLogger(__name__)

QUOTES_PATH = Path(__file__).resolve().parent.parent / "data" / "quotes.yaml"


@dataclass(frozen=True)
class DailyQuote:
    text: str
    reference: str


@lru_cache(maxsize=None)
def load_quotes(path: Path = QUOTES_PATH) -> tuple[DailyQuote, ...]:
    try:
        raw = yaml.safe_load(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        logger.error(f"Quotes file not found at {path}")
        raise

    items = (raw or {}).get("quotes") or []
    quotes = []
    for i, item in enumerate(items):
        if not item.get("text") or not item.get("reference"):
            raise ValueError(f"quote #{i} in {path} needs 'text' and 'reference'")
        quotes.append(DailyQuote(str(item["text"]), str(item["reference"])))
    if not quotes:
        raise ValueError(f"no quotes defined in {path}")
    return tuple(quotes)


def day_of_year(d: date) -> int:
    """1-based ordinal day within the year (Jan 1 -> 1)."""
    return d.timetuple().tm_yday


def daily_quote(d: date | str, quotes: tuple[DailyQuote, ...] | None = None) -> DailyQuote:
    """Same calendar day always yields the same quote, across restarts."""
    quotes = quotes or load_quotes()
    return quotes[day_of_year(parse_target_date(d)) % len(quotes)]
