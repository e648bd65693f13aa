from datetime import date, datetime

import pytest

from agendabot.db.agenda import (
    SqlAgendaStore,
    appointment_from_row,
    appointments_query,
    surgeries_query,
    surgery_from_row,
)


def test_appointments_query_covers_whole_day_and_skips_cancelled():
    compiled = appointments_query(date(2025, 3, 10)).compile()
    sql = str(compiled)
    params = list(compiled.params.values())

    assert "consultations.scheduled_at >=" in sql
    assert "consultations.scheduled_at <" in sql
    assert "JOIN patients" in sql
    assert "ORDER BY consultations.scheduled_at" in sql
    assert datetime(2025, 3, 10) in params
    assert datetime(2025, 3, 11) in params
    assert "cancelada" in params


def test_surgeries_query_filters_by_date():
    compiled = surgeries_query(date(2025, 3, 10)).compile()
    assert "surgeries.surgery_date =" in str(compiled)
    assert date(2025, 3, 10) in compiled.params.values()
    assert "cancelada" in compiled.params.values()


def test_appointment_row_mapping():
    appt = appointment_from_row(
        {
            "name": "Ana Souza",
            "whatsapp": None,
            "phone": "+55 34 99999-0000",
            "insurance_type": "unimed",
            "scheduled_at": datetime(2025, 3, 10, 8, 30),
        }
    )
    assert appt.patient_name == "Ana Souza"
    assert appt.time == "08:30"
    assert appt.insurance_type == "unimed"
    assert appt.whatsapp == "+55 34 99999-0000"


def test_appointment_row_missing_values():
    appt = appointment_from_row({"name": None, "scheduled_at": None, "insurance_type": ""})
    assert appt.time is None
    assert appt.insurance_type is None
    assert appt.display_time == "00:00"


def test_surgery_row_mapping():
    s = surgery_from_row(
        {
            "patient_name": "Caio",
            "surgery_time": "",
            "surgery_type": "Colecistectomia",
            "hospital": "Hospital de Clínicas",
            "payment_type": "plano",
        }
    )
    assert s.time is None
    assert (s.surgery_type, s.hospital, s.payment_type) == (
        "Colecistectomia",
        "Hospital de Clínicas",
        "plano",
    )


class _Result:
    def __init__(self, rows):
        self._rows = rows

    def mappings(self):
        return self

    def all(self):
        return self._rows


class _Conn:
    def __init__(self, rows):
        self.rows = rows
        self.statements = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def execute(self, stmt):
        self.statements.append(stmt)
        return _Result(self.rows)


class _Engine:
    def __init__(self, rows):
        self.conn = _Conn(rows)

    def connect(self):
        return self.conn


@pytest.mark.asyncio
async def test_store_maps_rows_from_connection():
    eng = _Engine(
        [{"patient_name": "Caio", "surgery_time": "07:00", "surgery_type": "X",
          "hospital": "HU", "payment_type": "particular"}]
    )
    store = SqlAgendaStore(engine=lambda: eng)

    result = await store.surgeries_by_date(date(2025, 3, 10))

    assert [s.patient_name for s in result] == ["Caio"]
    assert len(eng.conn.statements) == 1
