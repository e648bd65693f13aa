# agendabot/adapters/telegram_adapter.py
from __future__ import annotations

import logging
from typing import Any, Optional

from aiogram import Bot, Dispatcher
from aiogram.filters import Command, CommandObject
from aiogram.types import Message

from agendabot.core import control
from agendabot.core.i18n import MESSAGES
from agendabot.core.logging_utils import kv
from agendabot.core.scheduler import AgendaScheduler


class TelegramAdapter:
    """
    Aiogram 3.x control commands for the agenda scheduler.

    /agenda_start, /agenda_stop, /agenda_stats, /agenda_tomorrow,
    /agenda_date AAAA-MM-DD. Only the configured chat may use them;
    messages from any other chat are ignored (INFO log).
    """

    def __init__(self, bot: Bot, scheduler: AgendaScheduler, admin_chat_id: int | str) -> None:
        self.bot = bot
        self.dp = Dispatcher()
        self.scheduler = scheduler
        self.admin_chat_id = str(admin_chat_id)
        self.log = logging.getLogger("agendabot.adapter")

        self.dp.message.register(self.on_start, Command("agenda_start"))
        self.dp.message.register(self.on_stop, Command("agenda_stop"))
        self.dp.message.register(self.on_stats, Command("agenda_stats"))
        self.dp.message.register(self.on_tomorrow, Command("agenda_tomorrow"))
        self.dp.message.register(self.on_date, Command("agenda_date"))

    def _authorized(self, message: Message) -> bool:
        chat_id = str(message.chat.id)
        if chat_id != self.admin_chat_id:
            user = getattr(message.from_user, "id", None)
            self.log.info("cmd.reject " + kv(chat_id=chat_id, user_id=user))
            return False
        return True

    async def _run(self, message: Message, action: str, target_date: Optional[str] = None) -> None:
        if not self._authorized(message):
            return
        result: dict[str, Any] = await control.execute(self.scheduler, action, target_date)
        await message.answer(control.render_reply(result), parse_mode=None)

    async def on_start(self, message: Message) -> None:
        await self._run(message, "start")

    async def on_stop(self, message: Message) -> None:
        await self._run(message, "stop")

    async def on_stats(self, message: Message) -> None:
        await self._run(message, "stats")

    async def on_tomorrow(self, message: Message) -> None:
        await self._run(message, "force_tomorrow")

    async def on_date(self, message: Message, command: Optional[CommandObject] = None) -> None:
        args = (command.args or "").strip() if command else ""
        if not args:
            if self._authorized(message):
                await message.answer(MESSAGES["cmd_usage_date"], parse_mode=None)
            return
        await self._run(message, "manual_schedule", args.split()[0])

    async def run_polling(self) -> None:
        self.log.info("adapter.polling " + kv(chat_id=self.admin_chat_id))
        await self.dp.start_polling(self.bot)
