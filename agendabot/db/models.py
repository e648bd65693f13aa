# agendabot/db/models.py
from __future__ import annotations

from sqlalchemy import (
    Column,
    Date,
    DateTime,
    ForeignKey,
    MetaData,
    String,
    Table,
    Text,
)

metadata = MetaData()

# Read-only view of the clinic schema: only the columns the agenda needs.

patients = Table(
    "patients",
    metadata,
    Column("id", String(40), primary_key=True),
    Column("name", String(200), nullable=False),
    Column("phone", String(30), nullable=True),
    Column("whatsapp", String(30), nullable=True),
    Column("insurance_type", String(20), nullable=True),  # 'unimed' | 'particular' | 'outro'
)

consultations = Table(
    "consultations",
    metadata,
    Column("id", String(40), primary_key=True),
    Column("patient_id", String(40), ForeignKey("patients.id"), nullable=False),
    Column("scheduled_at", DateTime, nullable=False),  # clinic local time, naive
    Column("status", String(20), nullable=False, server_default="agendada"),
    Column("notes", Text, nullable=True),
)

surgeries = Table(
    "surgeries",
    metadata,
    Column("id", String(40), primary_key=True),
    Column("patient_name", String(200), nullable=False),
    Column("surgery_date", Date, nullable=False),
    Column("surgery_time", String(5), nullable=True),  # HH:MM
    Column("surgery_type", String(200), nullable=True),
    Column("hospital", String(200), nullable=True),
    Column("payment_type", String(20), nullable=True),  # 'plano' | 'particular'
    Column("status", String(20), nullable=False, server_default="agendada"),
)

CANCELLED = "cancelada"
