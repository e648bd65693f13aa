# agendabot/tests/test_adapter_flow.py
from types import SimpleNamespace
from unittest.mock import AsyncMock, Mock

import pytest

from agendabot.adapters.telegram_adapter import TelegramAdapter


class DummyDispatcher:
    """Stands in for aiogram.Dispatcher: register() calls are plain Mocks."""

    def __init__(self):
        self.message = Mock()
        self.callback_query = Mock()
        self.start_polling = AsyncMock()


def _msg(chat_id, text="/agenda_stats"):
    return SimpleNamespace(
        chat=SimpleNamespace(id=chat_id),
        from_user=SimpleNamespace(id=1),
        text=text,
        answer=AsyncMock(),
    )


@pytest.fixture
def adapter_factory(monkeypatch, scheduler_factory):
    monkeypatch.setattr("agendabot.adapters.telegram_adapter.Dispatcher", DummyDispatcher)

    def make(**kwargs):
        sched, clock, store, bot = scheduler_factory(**kwargs)
        return TelegramAdapter(bot, sched, admin_chat_id=-100), sched, bot

    return make


def test_registers_all_commands(adapter_factory):
    adapter, *_ = adapter_factory()
    assert adapter.dp.message.register.call_count == 5


@pytest.mark.asyncio
async def test_stats_reply_in_admin_chat(adapter_factory):
    adapter, sched, bot = adapter_factory()
    msg = _msg(-100)

    await adapter.on_stats(msg)

    msg.answer.assert_awaited_once()
    assert "Registros: 0" in msg.answer.await_args.args[0]


@pytest.mark.asyncio
async def test_other_chats_are_ignored(adapter_factory):
    adapter, sched, bot = adapter_factory()
    msg = _msg(555)

    await adapter.on_tomorrow(msg)

    msg.answer.assert_not_awaited()
    assert bot.calls == []


@pytest.mark.asyncio
async def test_tomorrow_command_sends_digest(adapter_factory):
    adapter, sched, bot = adapter_factory()
    msg = _msg(-100, "/agenda_tomorrow")

    await adapter.on_tomorrow(msg)

    assert len(bot.calls) == 1
    assert "2025-03-10" in msg.answer.await_args.args[0]


@pytest.mark.asyncio
async def test_date_command_validates_argument(adapter_factory):
    adapter, sched, bot = adapter_factory()

    usage = _msg(-100, "/agenda_date")
    await adapter.on_date(usage, command=SimpleNamespace(args=None))
    assert "AAAA-MM-DD" in usage.answer.await_args.args[0]

    bad = _msg(-100, "/agenda_date 10-03-2025")
    await adapter.on_date(bad, command=SimpleNamespace(args="10-03-2025"))
    assert "invalid date" in bad.answer.await_args.args[0]
    assert bot.calls == []


@pytest.mark.asyncio
async def test_run_polling_delegates_to_dispatcher(adapter_factory):
    adapter, sched, bot = adapter_factory()
    await adapter.run_polling()
    adapter.dp.start_polling.assert_awaited_once_with(adapter.bot)
