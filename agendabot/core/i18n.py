"""
pt-BR message catalog for the agenda digest and bot command replies.

Texts are Telegram legacy Markdown: '*bold*', '_italic_'.
"""

from __future__ import annotations

WEEKDAYS_PT = [
    "segunda-feira",
    "terça-feira",
    "quarta-feira",
    "quinta-feira",
    "sexta-feira",
    "sábado",
    "domingo",
]

MONTHS_PT = [
    "janeiro",
    "fevereiro",
    "março",
    "abril",
    "maio",
    "junho",
    "julho",
    "agosto",
    "setembro",
    "outubro",
    "novembro",
    "dezembro",
]

INSURANCE_LABELS = {
    "unimed": "🏥 Unimed",
    "particular": "💳 Particular",
    "outro": "🏥 Outro convênio",
}

PAYMENT_LABELS = {
    "plano": "🏥 Plano",
    "particular": "💳 Particular",
}

MESSAGES = {
    # Digest
    "digest_title": "📅 *AGENDA DO DIA*",
    "digest_date": "📆 *{date}*",
    "digest_counts": (
        "👥 *Consultas: {appointments}*\n"
        "🏥 *Cirurgias: {surgeries}*\n"
        "📊 *Total: {total}*"
    ),
    "digest_span": "⏱️ Primeiro horário: *{first}* | Último: *{last}*",
    "digest_empty": (
        "🏖️ *Sem atividades agendadas para este dia*\n\n"
        "✨ Aproveite para descansar ou organizar outras atividades!"
    ),
    "section_appointments": "📋 *CONSULTAS AGENDADAS:*",
    "section_surgeries": "🏥 *CIRURGIAS AGENDADAS:*",
    "appointment_line": "{index}. ⏰ *{time}* - {name}\n   {insurance} | 📱 {whatsapp}",
    "surgery_line": "{index}. ⏰ *{time}* - {name}\n   🔪 {surgery_type}\n   🏥 {hospital} | {payment}",
    "quote": '📖 *Versículo do Dia:*\n"{text}"\n*{reference}*',
    "unknown_name": "Nome não informado",
    "unknown_field": "Não informado",
    # Control replies
    "ctl_started": "✅ Agendamento diário iniciado.",
    "ctl_already_running": "ℹ️ Agendamento diário já estava ativo.",
    "ctl_stopped": "⏹️ Agendamento diário parado.",
    "ctl_not_running": "ℹ️ Agendamento diário já estava parado.",
    "ctl_stats": (
        "📊 Ativo: {running}\n"
        "Registros: {total}\n"
        "Enviados hoje: {sent_today}\n"
        "Pendentes: {pending}\n"
        "Falhas: {failed}"
    ),
    "ctl_sent": "✅ Agenda de {date} enviada.",
    "ctl_failed": "❌ Falha ao enviar agenda: {error}",
    "ctl_missing_date": "targetDate é obrigatório para agendamento manual",
    "ctl_unknown_action": (
        "Ação não reconhecida. Use: start, stop, stats, force_tomorrow, manual_schedule"
    ),
    "cmd_usage_date": "Uso: /agenda_date AAAA-MM-DD",
}


def fmt(key: str, **kwargs) -> str:
    return MESSAGES[key].format(**kwargs)
