# agendabot/app.py
from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from aiogram import Bot

from agendabot import config as cfg
from agendabot.adapters.telegram_adapter import TelegramAdapter
from agendabot.core.clock import Clock
from agendabot.core.config_validation import validate_config
from agendabot.core.dispatcher import TelegramDispatcher
from agendabot.core.gatherer import AgendaGatherer
from agendabot.core.logging_utils import kv, setup_logging
from agendabot.core.scheduler import AgendaScheduler
from agendabot.db import session
from agendabot.db.agenda import SqlAgendaStore


def build_scheduler(config: Any, bot: Optional[Bot]) -> AgendaScheduler:
    """Wire clock, store, gatherer and dispatcher into one scheduler instance."""
    clock = Clock(config.TZ)
    dispatcher = TelegramDispatcher(
        bot,
        config.TELEGRAM_CHAT_ID,
        max_attempts=config.DISPATCH_MAX_ATTEMPTS,
        retry_delay_s=config.DISPATCH_RETRY_DELAY_S,
        request_timeout_s=config.DISPATCH_TIMEOUT_S,
    )
    return AgendaScheduler(
        clock,
        AgendaGatherer(SqlAgendaStore()),
        dispatcher,
        trigger_hour=config.TRIGGER_HOUR,
        trigger_minute=config.TRIGGER_MINUTE,
        tick_seconds=config.TICK_SECONDS,
        retention_days=config.RECORD_RETENTION_DAYS,
        retry_failed_same_day=config.RETRY_FAILED_SAME_DAY,
    )


async def main() -> None:
    setup_logging(cfg)
    log = logging.getLogger("agendabot.app")
    validate_config(cfg)

    bot: Optional[Bot] = None
    if cfg.telegram_configured():
        bot = Bot(token=cfg.TELEGRAM_BOT_TOKEN)
    else:
        log.warning("startup.telegram " + kv(configured=False))

    scheduler = build_scheduler(cfg, bot)
    adapter = None
    if bot is not None and cfg.COMMANDS_ENABLED:
        adapter = TelegramAdapter(bot, scheduler, cfg.TELEGRAM_CHAT_ID)

    scheduler.start()
    log.info(
        "startup.ready "
        + kv(tz=cfg.TIMEZONE, trigger=f"{cfg.TRIGGER_HOUR:02d}:{cfg.TRIGGER_MINUTE:02d}",
             commands=adapter is not None)
    )

    try:
        if cfg.CATCH_UP_ON_START:
            await scheduler.catch_up()
        if adapter is not None:
            await adapter.run_polling()
        else:
            # No bot commands: just keep the event loop alive for the scheduler
            await asyncio.Event().wait()
    finally:
        scheduler.stop()
        await scheduler.dispatcher.close()
        await session.dispose()


def run() -> None:
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
