# agendabot/core/scheduler.py
from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Callable, Optional, Sequence

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from agendabot.core.agenda import Appointment, Surgery
from agendabot.core.clock import Clock, InvalidTargetDate, parse_target_date
from agendabot.core.dispatcher import DispatchResult, TelegramDispatcher
from agendabot.core.formatter import format_digest
from agendabot.core.gatherer import AgendaGatherer
from agendabot.core.logging_utils import kv

Formatter = Callable[[date, Sequence[Appointment], Sequence[Surgery]], str]


class SchedulerState(str, Enum):
    STOPPED = "stopped"
    RUNNING = "running"


class DispatchStatus(str, Enum):
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


@dataclass
class DispatchRecord:
    """One automatic attempt to send the digest for target_date."""

    id: str
    scheduled_at: datetime  # wall clock in the scheduler timezone
    target_date: date
    status: DispatchStatus = DispatchStatus.PENDING


class AgendaScheduler:
    """
    Sends tomorrow's agenda once per day at the trigger time.

    Owns the periodic tick (APScheduler interval job) and the in-memory
    dispatch records. A 'sent' record for (target_date, day of creation)
    makes later automatic runs that day a no-op. Manual sends bypass both
    the trigger time and the records.
    """

    TICK_JOB_ID = "agenda:tick"
    PRUNE_JOB_ID = "agenda:prune"

    def __init__(
        self,
        clock: Clock,
        gatherer: AgendaGatherer,
        dispatcher: TelegramDispatcher,
        *,
        trigger_hour: int = 20,
        trigger_minute: int = 0,
        tick_seconds: int = 60,
        retention_days: int = 7,
        retry_failed_same_day: bool = False,
        formatter: Formatter = format_digest,
    ) -> None:
        self.clock = clock
        self.gatherer = gatherer
        self.dispatcher = dispatcher
        self.formatter = formatter
        self.trigger_hour = trigger_hour
        self.trigger_minute = trigger_minute
        self.tick_seconds = tick_seconds
        self.retention_days = retention_days
        self.retry_failed_same_day = retry_failed_same_day

        self.log = logging.getLogger("agendabot.scheduler")
        self.state = SchedulerState.STOPPED
        self._sched: Optional[AsyncIOScheduler] = None
        self._records: list[DispatchRecord] = []
        self._seq = itertools.count(1)

    # ---- lifecycle ------------------------------------------------------------------
    @property
    def running(self) -> bool:
        return self.state is SchedulerState.RUNNING

    def start(self) -> bool:
        """STOPPED -> RUNNING. Returns False (and does nothing) if already running."""
        if self.running:
            self.log.info("scheduler.start.skip " + kv(reason="already running"))
            return False

        sched = AsyncIOScheduler(timezone=self.clock.tz)
        sched.add_job(
            self.tick,
            trigger="interval",
            seconds=self.tick_seconds,
            id=self.TICK_JOB_ID,
            replace_existing=True,
            coalesce=True,
            max_instances=1,
            misfire_grace_time=self.tick_seconds,
        )
        sched.add_job(
            self._prune_job,
            trigger="cron",
            hour=3,
            minute=0,
            id=self.PRUNE_JOB_ID,
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        sched.start()

        self._sched = sched
        self.state = SchedulerState.RUNNING
        self.log.info(
            "scheduler.started "
            + kv(
                trigger=f"{self.trigger_hour:02d}:{self.trigger_minute:02d}",
                tz=str(self.clock.tz),
                tick_s=self.tick_seconds,
            )
        )
        return True

    def stop(self) -> bool:
        """RUNNING -> STOPPED. In-flight sends are left to finish."""
        if not self.running:
            return False
        if self._sched is not None:
            self._sched.shutdown(wait=False)
        self._sched = None
        self.state = SchedulerState.STOPPED
        self.log.info("scheduler.stopped")
        return True

    # ---- records --------------------------------------------------------------------
    @property
    def records(self) -> tuple[DispatchRecord, ...]:
        return tuple(self._records)

    def _new_record(self, now: datetime, target: date) -> DispatchRecord:
        rec = DispatchRecord(
            id=f"daily-{now.date().isoformat()}-{target.isoformat()}-{next(self._seq)}",
            scheduled_at=now,
            target_date=target,
        )
        self._records.append(rec)
        return rec

    def _records_for(self, target: date, day: date) -> list[DispatchRecord]:
        return [
            r
            for r in self._records
            if r.target_date == target and r.scheduled_at.date() == day
        ]

    def already_sent(self, target: date, day: date) -> bool:
        return any(r.status is DispatchStatus.SENT for r in self._records_for(target, day))

    def prune_records(self, now: Optional[datetime] = None) -> int:
        now = now or self.clock.now()
        cutoff = now - timedelta(days=self.retention_days)
        before = len(self._records)
        self._records = [r for r in self._records if r.scheduled_at > cutoff]
        removed = before - len(self._records)
        if removed:
            self.log.info("records.pruned " + kv(removed=removed, kept=len(self._records)))
        return removed

    async def _prune_job(self) -> None:
        # Coroutine job: AsyncIOExecutor runs it on the loop, never in a worker thread
        self.prune_records()

    def stats(self) -> dict:
        today = self.clock.today()
        return {
            "running": self.running,
            "total": len(self._records),
            "sent_today": sum(
                1
                for r in self._records
                if r.status is DispatchStatus.SENT and r.scheduled_at.date() == today
            ),
            "pending": sum(1 for r in self._records if r.status is DispatchStatus.PENDING),
            "failed": sum(1 for r in self._records if r.status is DispatchStatus.FAILED),
        }

    # ---- automatic path -------------------------------------------------------------
    def trigger_at(self, day: date) -> datetime:
        return self.clock.at(day, self.trigger_hour, self.trigger_minute)

    def is_due(self, now: datetime) -> bool:
        """
        Due inside [trigger, trigger + tick) so exactly one poll per day hits it.
        With retry_failed_same_day, later ticks that day are due while the only
        records for tomorrow are failures.
        """
        trigger = self.trigger_at(now.date())
        if trigger <= now < trigger + timedelta(seconds=self.tick_seconds):
            return True
        if self.retry_failed_same_day and now >= trigger:
            target = self.clock.add_days(now.date(), 1)
            recs = self._records_for(target, now.date())
            return bool(recs) and all(r.status is DispatchStatus.FAILED for r in recs)
        return False

    async def tick(self) -> None:
        """Periodic job body: never raises, so the interval job keeps running."""
        try:
            await self.run_daily_if_due()
        except Exception as e:
            self.log.exception("tick.error " + kv(err=str(e)))

    async def run_daily_if_due(self, now: Optional[datetime] = None) -> Optional[DispatchResult]:
        now = (now or self.clock.now()).astimezone(self.clock.tz)
        if not self.is_due(now):
            return None
        self.log.info("daily.trigger " + kv(now=now.isoformat(timespec="seconds")))
        return await self._run_automatic(now)

    async def catch_up(self) -> Optional[DispatchResult]:
        """Startup check: trigger time already passed today and nothing sent yet -> send now."""
        now = self.clock.now()
        if now < self.trigger_at(now.date()):
            self.log.info("catch_up.skip " + kv(reason="before trigger time"))
            return None
        self.log.info("catch_up.run " + kv(now=now.isoformat(timespec="seconds")))
        try:
            return await self._run_automatic(now)
        except Exception as e:
            self.log.exception("catch_up.error " + kv(err=str(e)))
            return None

    async def _run_automatic(self, now: datetime) -> Optional[DispatchResult]:
        today = now.date()
        target = self.clock.add_days(today, 1)

        if self.already_sent(target, today):
            self.log.info(
                "daily.skip " + kv(reason="already sent", target=target.isoformat())
            )
            return None

        rec = self._new_record(now, target)
        try:
            result = await self._deliver(target)
        except Exception:
            rec.status = DispatchStatus.FAILED
            raise

        rec.status = DispatchStatus.SENT if result.success else DispatchStatus.FAILED
        self.log.info(
            "daily.done "
            + kv(record=rec.id, status=rec.status.value, error=result.error)
        )
        return result

    # ---- manual paths ---------------------------------------------------------------
    async def force_send_tomorrow(self) -> DispatchResult:
        """Send tomorrow's digest now. No trigger gate, no idempotency, no record."""
        target = self.clock.tomorrow()
        self.log.info("manual.force_tomorrow " + kv(target=target.isoformat()))
        return await self._deliver_safe(target)

    async def schedule_manual_daily_agenda(self, target_date: date | str) -> DispatchResult:
        """Send the digest for any date now. Invalid dates fail before any I/O."""
        try:
            target = parse_target_date(target_date)
        except InvalidTargetDate as e:
            self.log.warning("manual.reject " + kv(target=target_date, err=str(e)))
            return DispatchResult(False, str(e))
        self.log.info("manual.schedule " + kv(target=target.isoformat()))
        return await self._deliver_safe(target)

    # ---- pipeline -------------------------------------------------------------------
    async def _deliver(self, target: date) -> DispatchResult:
        """gather -> format -> dispatch, strictly in that order."""
        agenda = await self.gatherer.gather(target)
        if agenda.is_partial:
            self.log.warning(
                "deliver.partial " + kv(target=target.isoformat(), failed=sorted(agenda.errors))
            )
        message = self.formatter(target, agenda.appointments, agenda.surgeries)
        return await self.dispatcher.dispatch(message)

    async def _deliver_safe(self, target: date) -> DispatchResult:
        try:
            return await self._deliver(target)
        except Exception as e:
            self.log.exception("deliver.error " + kv(target=target.isoformat(), err=str(e)))
            return DispatchResult(False, str(e))
