# agendabot/db/agenda.py
from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Any, Callable, Mapping

from sqlalchemy import Select, and_, select
from sqlalchemy.ext.asyncio import AsyncEngine

from agendabot.core.agenda import Appointment, Surgery
from agendabot.db.models import CANCELLED, consultations, patients, surgeries
from agendabot.db.session import engine as default_engine


def appointments_query(d: date) -> Select:
    start = datetime.combine(d, time.min)
    end = start + timedelta(days=1)
    return (
        select(
            patients.c.name,
            patients.c.whatsapp,
            patients.c.phone,
            patients.c.insurance_type,
            consultations.c.scheduled_at,
        )
        .select_from(
            consultations.join(patients, consultations.c.patient_id == patients.c.id)
        )
        .where(
            and_(
                consultations.c.scheduled_at >= start,
                consultations.c.scheduled_at < end,
                consultations.c.status != CANCELLED,
            )
        )
        .order_by(consultations.c.scheduled_at)
    )


def surgeries_query(d: date) -> Select:
    return (
        select(
            surgeries.c.patient_name,
            surgeries.c.surgery_time,
            surgeries.c.surgery_type,
            surgeries.c.hospital,
            surgeries.c.payment_type,
        )
        .where(
            and_(
                surgeries.c.surgery_date == d,
                surgeries.c.status != CANCELLED,
            )
        )
        .order_by(surgeries.c.surgery_time)
    )


def appointment_from_row(row: Mapping[str, Any]) -> Appointment:
    scheduled_at = row.get("scheduled_at")
    return Appointment(
        patient_name=row.get("name"),
        time=scheduled_at.strftime("%H:%M") if scheduled_at else None,
        insurance_type=(row.get("insurance_type") or None),
        # WhatsApp falls back to the plain phone number
        whatsapp=row.get("whatsapp") or row.get("phone") or None,
    )


def surgery_from_row(row: Mapping[str, Any]) -> Surgery:
    return Surgery(
        patient_name=row.get("patient_name"),
        time=row.get("surgery_time") or None,
        surgery_type=row.get("surgery_type"),
        hospital=row.get("hospital"),
        payment_type=row.get("payment_type"),
    )


class SqlAgendaStore:
    """Read-only agenda queries over the clinic database (async SQLAlchemy Core)."""

    def __init__(self, engine: Callable[[], AsyncEngine] = default_engine) -> None:
        self._engine = engine

    async def appointments_by_date(self, d: date) -> list[Appointment]:
        async with self._engine().connect() as conn:
            rows = (await conn.execute(appointments_query(d))).mappings().all()
        return [appointment_from_row(r) for r in rows]

    async def surgeries_by_date(self, d: date) -> list[Surgery]:
        async with self._engine().connect() as conn:
            rows = (await conn.execute(surgeries_query(d))).mappings().all()
        return [surgery_from_row(r) for r in rows]
