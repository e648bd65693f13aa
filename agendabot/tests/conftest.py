# agendabot/tests/conftest.py
import sys
import types
from datetime import date, datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

# This file is at <project_root>/agendabot/tests/conftest.py
ROOT = Path(__file__).resolve().parents[2]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from agendabot.core.clock import Clock  # noqa: E402
from agendabot.core.dispatcher import TelegramDispatcher  # noqa: E402
from agendabot.core.gatherer import AgendaGatherer  # noqa: E402
from agendabot.core.scheduler import AgendaScheduler  # noqa: E402

SP = ZoneInfo("America/Sao_Paulo")


class FakeClock(Clock):
    """Clock frozen at a settable moment (in the clock's timezone)."""

    def __init__(self, current: datetime, tz: ZoneInfo = SP):
        super().__init__(tz)
        self.current = current

    def now(self) -> datetime:
        return self.current

    def set(self, *args) -> None:
        self.current = datetime(*args, tzinfo=self.tz)


class FakeBot:
    """Async bot stand-in: records send_message calls, fails the first `fail_times`."""

    def __init__(self, fail_times: int = 0, error: Exception | None = None):
        self.fail_times = fail_times
        self.error = error or RuntimeError("Telegram API 502: Bad Gateway")
        self.calls = []  # kwargs of every send_message attempt
        self.session = types.SimpleNamespace(closed=False)

        async def _close():
            self.session.closed = True

        self.session.close = _close

    @property
    def sent(self):
        return [c["text"] for c in self.calls[self.fail_times:]]

    async def send_message(self, **kwargs):
        self.calls.append(kwargs)
        if len(self.calls) <= self.fail_times:
            raise self.error
        return types.SimpleNamespace(message_id=len(self.calls))


class FakeStore:
    """In-memory AgendaStore keyed by date; `fail` names sides that raise."""

    def __init__(self, appointments=None, surgeries=None, fail=()):
        self.appointments = appointments or {}
        self.surgeries = surgeries or {}
        self.fail = set(fail)
        self.queries = []

    async def appointments_by_date(self, d: date):
        self.queries.append(("appointments", d))
        if "appointments" in self.fail:
            raise ConnectionError("appointments query timed out")
        return list(self.appointments.get(d, []))

    async def surgeries_by_date(self, d: date):
        self.queries.append(("surgeries", d))
        if "surgeries" in self.fail:
            raise ConnectionError("surgeries table missing")
        return list(self.surgeries.get(d, []))


def make_scheduler(
    now: datetime | None = None,
    store: FakeStore | None = None,
    bot: FakeBot | None = None,
    chat_id="12345",
    max_attempts: int = 3,
    **kwargs,
):
    clock = FakeClock(now or datetime(2025, 3, 9, 20, 0, 10, tzinfo=SP))
    store = store or FakeStore()
    bot = bot if bot is not None else FakeBot()
    dispatcher = TelegramDispatcher(
        bot, chat_id, max_attempts=max_attempts, retry_delay_s=0
    )
    sched = AgendaScheduler(clock, AgendaGatherer(store), dispatcher, **kwargs)
    return sched, clock, store, bot


@pytest.fixture
def fake_bot():
    return FakeBot()


@pytest.fixture
def fake_store():
    return FakeStore()


@pytest.fixture
def scheduler_factory():
    return make_scheduler


@pytest.fixture
def store_factory():
    return FakeStore


@pytest.fixture
def bot_factory():
    return FakeBot


@pytest.fixture
def clock_factory():
    return FakeClock
