# agendabot/core/dispatcher.py
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional

from aiogram.enums import ParseMode
from aiogram.types import LinkPreviewOptions

from agendabot.core.logging_utils import kv

NOT_CONFIGURED = "not configured"


@dataclass(frozen=True)
class DispatchResult:
    success: bool
    error: Optional[str] = None
    attempts: int = 0

    def as_dict(self) -> dict:
        out: dict[str, Any] = {"success": self.success}
        if self.error is not None:
            out["error"] = self.error
        return out


class TelegramDispatcher:
    """
    Posts one text message to the doctor's chat with bounded retry.

    dispatch() never raises: transport/API failures are retried
    max_attempts times with a fixed delay and then reported in DispatchResult.
    Without a bot or chat id it returns 'not configured' and does no I/O.
    """

    def __init__(
        self,
        bot: Any | None,
        chat_id: int | str | None,
        *,
        max_attempts: int = 3,
        retry_delay_s: float = 2.0,
        request_timeout_s: int | None = 10,
    ) -> None:
        self.bot = bot
        self.chat_id = chat_id
        self.max_attempts = max(1, int(max_attempts))
        self.retry_delay_s = retry_delay_s
        self.request_timeout_s = request_timeout_s
        self.log = logging.getLogger("agendabot.dispatcher")

    @property
    def configured(self) -> bool:
        return self.bot is not None and bool(self.chat_id)

    async def _send(self, message: str) -> None:
        await self.bot.send_message(
            chat_id=self.chat_id,
            text=message,
            parse_mode=ParseMode.MARKDOWN,
            link_preview_options=LinkPreviewOptions(is_disabled=False),
            request_timeout=self.request_timeout_s,
        )

    async def dispatch(self, message: str) -> DispatchResult:
        if not self.configured:
            self.log.warning("dispatch.skip " + kv(reason=NOT_CONFIGURED))
            return DispatchResult(False, NOT_CONFIGURED, attempts=0)

        last_error: str | None = None
        for attempt in range(1, self.max_attempts + 1):
            try:
                await self._send(message)
            except asyncio.CancelledError:
                raise
            except Exception as e:  # aiogram TelegramAPIError / network errors
                last_error = f"{type(e).__name__}: {e}"
                self.log.warning(
                    "dispatch.attempt.fail "
                    + kv(attempt=attempt, max_attempts=self.max_attempts, err=last_error)
                )
                if attempt < self.max_attempts:
                    await asyncio.sleep(self.retry_delay_s)
                continue

            self.log.info(
                "dispatch.ok " + kv(attempt=attempt, chars=len(message))
            )
            return DispatchResult(True, attempts=attempt)

        self.log.error(
            "dispatch.exhausted " + kv(attempts=self.max_attempts, err=last_error)
        )
        return DispatchResult(False, last_error, attempts=self.max_attempts)

    async def close(self) -> None:
        session = getattr(self.bot, "session", None)
        if session is not None:
            await session.close()
