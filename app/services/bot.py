"""Chat bot command handling, independent of the messaging transport.

The transport delivers each group message to ``ChatBot.handle`` and posts
the returned text back to the group.
"""

import logging
from collections.abc import Awaitable, Callable
from datetime import date, datetime

from sqlalchemy.orm import Session

from app.core.config import Settings
from app.services.floor_assignment import assign_floor, get_floor_by_phone
from app.services.formatter import format_payments, format_report
from app.services.meter_reading import register_reading
from app.services.ocr import OcrResult, extract_meter_reading
from app.services.providers import ProviderError, UtilitySources
from app.services.report import fetch_all_data

logger = logging.getLogger(__name__)

OcrFunc = Callable[[Settings, bytes, str], Awaitable[OcrResult]]


def is_schedule_due(now: datetime, last_sent: date | None, day: int, hour: int) -> bool:
    """The scheduled report goes out on the configured day and hour, once per date."""
    if last_sent == now.date():
        return False
    return now.day == day and now.hour == hour


class ChatBot:
    """Answers the group's commands: report, payments, floor assignment and meter photos."""

    def __init__(
        self,
        settings: Settings,
        sources: UtilitySources,
        ocr: OcrFunc = extract_meter_reading,
    ) -> None:
        self.settings = settings
        self.sources = sources
        self.ocr = ocr
        self.last_sent: date | None = None

    async def handle(
        self,
        db: Session,
        sender: str,
        text: str,
        image: bytes | None = None,
        mime_type: str = "image/jpeg",
    ) -> str | None:
        """Return the reply for a message, or None when it is not a command."""
        command = text.lower().strip()
        s = self.settings

        if command == s.TRIGGER_KEYWORD.lower():
            return await self.report_text(db)
        if command == s.TRIGGER_PAYMENTS.lower():
            return await self.payments_text(db)
        if command.startswith(s.TRIGGER_PISO.lower()):
            args = command[len(s.TRIGGER_PISO) :].strip()
            return self.handle_floor_command(db, sender, args)
        if command.startswith(s.TRIGGER_MEDIDOR.lower()):
            if image is None:
                return "⚠️ Envía una foto del medidor con el texto `!medidor`"
            return await self.handle_meter_image(db, sender, image, mime_type)
        return None

    async def report_text(self, db: Session) -> str:
        try:
            data = await fetch_all_data(self.sources, db, self.settings)
        except ProviderError:
            logger.exception("Error generating report")
            return "❌ Error al generar el reporte. Intenta de nuevo."
        self.last_sent = datetime.now().date()
        return format_report(data)

    async def payments_text(self, db: Session) -> str:
        try:
            data = await fetch_all_data(self.sources, db, self.settings)
        except ProviderError:
            logger.exception("Error generating payments summary")
            return "❌ Error al generar el resumen. Intenta de nuevo."
        return format_payments(data)

    def handle_floor_command(self, db: Session, sender: str, args: str) -> str:
        floor_count = self.settings.FLOOR_COUNT
        usage = f"⚠️ Uso: `{self.settings.TRIGGER_PISO} <1-{floor_count}>`\nEjemplo: `!piso 1`"
        if not args.isdigit():
            return usage
        floor = int(args)
        if not 1 <= floor <= floor_count:
            return usage

        assign_floor(db, floor, sender)
        return f"✅ Te asigné al *Piso {floor}*"

    async def handle_meter_image(
        self,
        db: Session,
        sender: str,
        image: bytes,
        mime_type: str,
    ) -> str:
        floor = get_floor_by_phone(db, sender)
        result = await self.ocr(self.settings, image, mime_type)
        if not result.success or result.reading is None:
            logger.warning("OCR failed: %s", result.error)
            return f"⚠️ No se pudo leer el medidor: {result.error or 'Error desconocido'}"

        if floor is None:
            return (
                f"📊 *Lectura detectada:* `{result.text}`\n"
                f"Asígnate un piso con `{self.settings.TRIGGER_PISO} <n>` para registrarla."
            )

        reading = register_reading(db, floor, result.reading)
        return (
            f"📊 *Lectura detectada (Piso {floor}):* `{result.text}`\n"
            f"✅ Registrada para {reading.month}: "
            f"{reading.start_reading} → {reading.end_reading} "
            f"({max(reading.consumption, 0):.1f} kWh)"
        )

    async def scheduled_report(self, db: Session, now: datetime | None = None) -> str | None:
        """Report text when the schedule is due, otherwise None."""
        now = now or datetime.now()
        s = self.settings
        if not is_schedule_due(now, self.last_sent, s.SCHEDULE_DAY, s.SCHEDULE_HOUR):
            return None
        text = await self.report_text(db)
        self.last_sent = now.date()
        return text
