import pytest
from aiogram.enums import ParseMode

from agendabot.core.dispatcher import NOT_CONFIGURED, TelegramDispatcher


@pytest.mark.asyncio
async def test_succeeds_on_third_attempt(bot_factory):
    bot = bot_factory(fail_times=2)
    disp = TelegramDispatcher(bot, "42", max_attempts=3, retry_delay_s=0)

    result = await disp.dispatch("agenda")

    assert result.success is True
    assert result.attempts == 3
    assert len(bot.calls) == 3


@pytest.mark.asyncio
async def test_always_failing_transport_reports_failure(bot_factory, caplog):
    bot = bot_factory(fail_times=99, error=ConnectionResetError("peer reset"))
    disp = TelegramDispatcher(bot, "42", max_attempts=4, retry_delay_s=0)

    result = await disp.dispatch("agenda")

    assert result.success is False
    assert result.attempts == 4
    assert len(bot.calls) == 4
    assert "peer reset" in result.error
    attempts_logged = [r for r in caplog.records if "dispatch.attempt.fail" in r.message]
    assert [("attempt=%d" % n) in r.message for n, r in enumerate(attempts_logged, 1)] == [True] * 4


@pytest.mark.asyncio
async def test_not_configured_short_circuits(bot_factory):
    bot = bot_factory()
    for disp in (
        TelegramDispatcher(None, "42"),
        TelegramDispatcher(bot, None),
        TelegramDispatcher(bot, ""),
    ):
        result = await disp.dispatch("agenda")
        assert result.success is False
        assert result.error == NOT_CONFIGURED
        assert result.attempts == 0
    assert bot.calls == []


@pytest.mark.asyncio
async def test_payload_shape(bot_factory):
    bot = bot_factory()
    disp = TelegramDispatcher(bot, "42", request_timeout_s=7)

    await disp.dispatch("*AGENDA*")

    call = bot.calls[0]
    assert call["chat_id"] == "42"
    assert call["text"] == "*AGENDA*"
    assert call["parse_mode"] == ParseMode.MARKDOWN
    assert call["link_preview_options"].is_disabled is False
    assert call["request_timeout"] == 7


@pytest.mark.asyncio
async def test_close_closes_bot_session(bot_factory):
    bot = bot_factory()
    await TelegramDispatcher(bot, "42").close()
    assert bot.session.closed is True


def test_result_as_dict():
    from agendabot.core.dispatcher import DispatchResult

    assert DispatchResult(True).as_dict() == {"success": True}
    assert DispatchResult(False, "boom").as_dict() == {"success": False, "error": "boom"}
