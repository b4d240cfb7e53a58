"""Monthly report email: HTML rendering and delivery through Resend."""

import logging
from datetime import datetime

import httpx

from app.core.config import Settings
from app.schemas.report import AggregatedReport
from app.web.template_config import templates

logger = logging.getLogger(__name__)

RESEND_URL = "https://api.resend.com/emails"


class EmailError(Exception):
    """The email could not be sent."""


def render_monthly_report(data: AggregatedReport, generated_at: datetime | None = None) -> str:
    """Render the monthly report email as HTML."""
    template = templates.env.get_template("email/monthly_report.html")
    return template.render(report=data, generated_at=generated_at or datetime.now())


def report_subject(data: AggregatedReport) -> str:
    period = data.electricity.billing_period or data.readings_month or ""
    return f"HomeOps - Reporte {period}".strip()


async def send_email(
    settings: Settings,
    subject: str,
    html: str,
    client: httpx.AsyncClient | None = None,
) -> str:
    """Send an HTML email and return the provider's message id."""
    if not settings.RESEND_API_KEY:
        raise EmailError("RESEND_API_KEY is not configured")
    if not settings.EMAIL_TO:
        raise EmailError("EMAIL_TO is not configured")

    recipients = [addr.strip() for addr in settings.EMAIL_TO.split(",") if addr.strip()]
    payload = {"from": settings.EMAIL_FROM, "to": recipients, "subject": subject, "html": html}
    headers = {"Authorization": f"Bearer {settings.RESEND_API_KEY}"}

    owns_client = client is None
    client = client or httpx.AsyncClient(timeout=settings.PROVIDER_TIMEOUT)
    try:
        response = await client.post(RESEND_URL, json=payload, headers=headers)
        response.raise_for_status()
        message_id = response.json().get("id", "")
    except httpx.HTTPError as e:
        raise EmailError(f"Sending email failed: {e}") from e
    except ValueError as e:
        raise EmailError("Email API returned an invalid response") from e
    finally:
        if owns_client:
            await client.aclose()

    logger.info("Sent '%s' to %s (id %s)", subject, ", ".join(recipients), message_id)
    return message_id


async def send_monthly_report(
    settings: Settings,
    data: AggregatedReport,
    client: httpx.AsyncClient | None = None,
) -> str:
    """Render and send the monthly report email."""
    return await send_email(settings, report_subject(data), render_monthly_report(data), client)
