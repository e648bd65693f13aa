# agendabot/core/agenda.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional, Union

DEFAULT_TIME = "00:00"


@dataclass(frozen=True)
class Appointment:
    """A consultation on the target day."""

    patient_name: Optional[str]
    time: Optional[str]  # HH:MM
    insurance_type: Optional[str] = None  # 'unimed' | 'particular' | 'outro'
    whatsapp: Optional[str] = None

    @property
    def display_time(self) -> str:
        return self.time or DEFAULT_TIME


@dataclass(frozen=True)
class Surgery:
    """A surgery on the target day."""

    patient_name: Optional[str]
    time: Optional[str]  # HH:MM
    surgery_type: Optional[str] = None
    hospital: Optional[str] = None
    payment_type: Optional[str] = None  # 'plano' | 'particular'

    @property
    def display_time(self) -> str:
        return self.time or DEFAULT_TIME


AgendaItem = Union[Appointment, Surgery]


@dataclass
class Agenda:
    """Result of one gather: both sides, plus which side(s) failed to load."""

    target_date: date
    appointments: list[Appointment] = field(default_factory=list)
    surgeries: list[Surgery] = field(default_factory=list)
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return len(self.appointments) + len(self.surgeries)

    @property
    def is_empty(self) -> bool:
        return self.total == 0

    @property
    def is_partial(self) -> bool:
        return bool(self.errors)


def by_time(items: Iterable[AgendaItem]) -> list[AgendaItem]:
    """Stable ascending sort on the HH:MM string."""
    return sorted(items, key=lambda item: item.display_time)


def timeline(
    appointments: Iterable[Appointment], surgeries: Iterable[Surgery]
) -> list[AgendaItem]:
    """Appointments then surgeries, merged into one time-ordered sequence (ties keep that order)."""
    return by_time([*appointments, *surgeries])
