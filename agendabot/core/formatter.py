# agendabot/core/formatter.py
"""
Daily agenda digest rendering.

Pure functions only: (target_date, appointments, surgeries) -> Markdown text.
Block order:
  1) title + long pt-BR date
  2) either the "no activity" block, or counts + first/last time + sections
  3) the quote of the day (always last)
"""

from __future__ import annotations

import re
from datetime import date
from typing import Iterable, Optional, Sequence

from agendabot.core.agenda import Appointment, Surgery, by_time, timeline
from agendabot.core.clock import parse_target_date
from agendabot.core.i18n import (
    INSURANCE_LABELS,
    MONTHS_PT,
    PAYMENT_LABELS,
    WEEKDAYS_PT,
    MESSAGES,
    fmt,
)
from agendabot.core.quotes import DailyQuote, daily_quote

_MD_SPECIAL = re.compile(r"([_*`\[])")


def escape_md(text: str) -> str:
    """Escape Telegram legacy-Markdown control characters in free text."""
    return _MD_SPECIAL.sub(r"\\\1", text)


def long_date_pt(d: date) -> str:
    """'Segunda-feira, 10 de março de 2025'."""
    text = f"{WEEKDAYS_PT[d.weekday()]}, {d.day} de {MONTHS_PT[d.month - 1]} de {d.year}"
    return text[0].upper() + text[1:]


def insurance_label(insurance_type: Optional[str]) -> str:
    key = (insurance_type or "particular").strip().lower()
    return INSURANCE_LABELS.get(key, INSURANCE_LABELS["particular"])


def payment_label(payment_type: Optional[str]) -> str:
    key = (payment_type or "particular").strip().lower()
    return PAYMENT_LABELS.get(key, PAYMENT_LABELS["particular"])


def format_quote(quote: DailyQuote) -> str:
    return fmt("quote", text=quote.text, reference=quote.reference)


def _name(value: Optional[str]) -> str:
    value = (value or "").strip()
    return escape_md(value) if value else MESSAGES["unknown_name"]


def _field(value: Optional[str]) -> str:
    value = (value or "").strip()
    return escape_md(value) if value else MESSAGES["unknown_field"]


def _appointment_lines(appointments: Iterable[Appointment]) -> list[str]:
    return [
        fmt(
            "appointment_line",
            index=i,
            time=a.display_time,
            name=_name(a.patient_name),
            insurance=insurance_label(a.insurance_type),
            whatsapp=_field(a.whatsapp),
        )
        for i, a in enumerate(by_time(appointments), start=1)
    ]


def _surgery_lines(surgeries: Iterable[Surgery]) -> list[str]:
    return [
        fmt(
            "surgery_line",
            index=i,
            time=s.display_time,
            name=_name(s.patient_name),
            surgery_type=_field(s.surgery_type),
            hospital=_field(s.hospital),
            payment=payment_label(s.payment_type),
        )
        for i, s in enumerate(by_time(surgeries), start=1)
    ]


def format_digest(
    target_date: date | str,
    appointments: Sequence[Appointment],
    surgeries: Sequence[Surgery],
    quote: Optional[DailyQuote] = None,
) -> str:
    d = parse_target_date(target_date)
    quote = quote or daily_quote(d)

    blocks = [MESSAGES["digest_title"], fmt("digest_date", date=long_date_pt(d))]

    if not appointments and not surgeries:
        blocks.append(MESSAGES["digest_empty"])
        blocks.append(format_quote(quote))
        return "\n\n".join(blocks)

    merged = timeline(appointments, surgeries)
    counts = fmt(
        "digest_counts",
        appointments=len(appointments),
        surgeries=len(surgeries),
        total=len(merged),
    )
    span = fmt("digest_span", first=merged[0].display_time, last=merged[-1].display_time)
    blocks.append(f"{counts}\n{span}")

    if appointments:
        blocks.append(MESSAGES["section_appointments"])
        blocks.extend(_appointment_lines(appointments))

    if surgeries:
        blocks.append(MESSAGES["section_surgeries"])
        blocks.extend(_surgery_lines(surgeries))

    blocks.append(format_quote(quote))
    return "\n\n".join(blocks)
