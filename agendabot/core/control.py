# agendabot/core/control.py
from __future__ import annotations

import logging
from typing import Any, Optional

from agendabot.core.i18n import MESSAGES, fmt
from agendabot.core.logging_utils import kv
from agendabot.core.scheduler import AgendaScheduler

ACTIONS = ("start", "stop", "stats", "force_tomorrow", "manual_schedule")

log = logging.getLogger("agendabot.control")


async def execute(
    scheduler: AgendaScheduler, action: str, target_date: Optional[str] = None
) -> dict[str, Any]:
    """
    Map a control action onto the scheduler and return a plain dict
    {'success': bool, 'message'?: str, 'stats'?: dict, 'error'?: str}.
    Never raises.
    """
    log.info("control.action " + kv(action=action, target_date=target_date))
    try:
        if action == "start":
            started = scheduler.start()
            return {
                "success": True,
                "message": MESSAGES["ctl_started" if started else "ctl_already_running"],
                "stats": scheduler.stats(),
            }

        if action == "stop":
            stopped = scheduler.stop()
            return {
                "success": True,
                "message": MESSAGES["ctl_stopped" if stopped else "ctl_not_running"],
            }

        if action == "stats":
            return {"success": True, "stats": scheduler.stats()}

        if action == "force_tomorrow":
            result = await scheduler.force_send_tomorrow()
            return _from_result(result, scheduler.clock.tomorrow().isoformat())

        if action == "manual_schedule":
            if not target_date:
                return {"success": False, "error": MESSAGES["ctl_missing_date"]}
            result = await scheduler.schedule_manual_daily_agenda(target_date)
            return _from_result(result, target_date)

        return {"success": False, "error": MESSAGES["ctl_unknown_action"]}
    except Exception as e:
        log.exception("control.error " + kv(action=action, err=str(e)))
        return {"success": False, "error": str(e)}


def _from_result(result, date_str: str) -> dict[str, Any]:
    out = result.as_dict()
    if result.success:
        out["message"] = fmt("ctl_sent", date=date_str)
    return out


def render_reply(result: dict[str, Any]) -> str:
    """Human-readable text for a control result (bot replies)."""
    if not result.get("success"):
        return fmt("ctl_failed", error=result.get("error", "?"))
    lines = []
    if result.get("message"):
        lines.append(result["message"])
    stats = result.get("stats")
    if stats:
        lines.append(
            fmt(
                "ctl_stats",
                running="sim" if stats["running"] else "não",
                total=stats["total"],
                sent_today=stats["sent_today"],
                pending=stats["pending"],
                failed=stats["failed"],
            )
        )
    return "\n".join(lines)
