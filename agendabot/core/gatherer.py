# agendabot/core/gatherer.py
from __future__ import annotations

import logging
from datetime import date
from typing import Protocol, Sequence

from agendabot.core.agenda import Agenda, Appointment, Surgery
from agendabot.core.clock import parse_target_date
from agendabot.core.logging_utils import kv


class AgendaStore(Protocol):
    """Read API of the clinic database (see agendabot.db.agenda.SqlAgendaStore)."""

    async def appointments_by_date(self, d: date) -> Sequence[Appointment]: ...

    async def surgeries_by_date(self, d: date) -> Sequence[Surgery]: ...


class AgendaGatherer:
    """
    Collects appointments and surgeries for one calendar date.

    A failed query on one side is logged and that side comes back empty;
    the digest still goes out with whatever could be read.
    """

    def __init__(self, store: AgendaStore) -> None:
        self.store = store
        self.log = logging.getLogger("agendabot.gatherer")

    async def gather(self, target_date: date | str) -> Agenda:
        # Raises InvalidTargetDate before touching the store
        d = parse_target_date(target_date)
        agenda = Agenda(target_date=d)

        try:
            agenda.appointments = list(await self.store.appointments_by_date(d))
        except Exception as e:
            agenda.errors["appointments"] = str(e)
            self.log.error(
                "gather.fail " + kv(side="appointments", date=d.isoformat(), err=str(e))
            )

        try:
            agenda.surgeries = list(await self.store.surgeries_by_date(d))
        except Exception as e:
            agenda.errors["surgeries"] = str(e)
            self.log.error(
                "gather.fail " + kv(side="surgeries", date=d.isoformat(), err=str(e))
            )

        self.log.info(
            "gather.done "
            + kv(
                date=d.isoformat(),
                appointments=len(agenda.appointments),
                surgeries=len(agenda.surgeries),
                partial=agenda.is_partial,
            )
        )
        return agenda
