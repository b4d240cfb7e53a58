"""Aggregated monthly report routes."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from app.api.dependencies import get_settings, get_utility_sources
from app.core.config import Settings
from app.core.database import get_db
from app.schemas.report import AggregatedReport
from app.services.email import EmailError, send_monthly_report
from app.services.formatter import format_payments, format_report
from app.services.providers import ProviderError, UtilitySources
from app.services.report import fetch_all_data

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/report", tags=["report"])


async def _fetch_report(
    sources: UtilitySources,
    db: Session,
    app_settings: Settings,
) -> AggregatedReport:
    try:
        return await fetch_all_data(sources, db, app_settings)
    except ProviderError as e:
        logger.error("Report fetch failed: %s", e)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e


@router.get("/", response_model=AggregatedReport)
async def get_report(
    db: Session = Depends(get_db),
    sources: UtilitySources = Depends(get_utility_sources),
    app_settings: Settings = Depends(get_settings),
) -> AggregatedReport:
    """Fetch all utilities and split them per floor."""
    return await _fetch_report(sources, db, app_settings)


@router.get("/text", response_class=PlainTextResponse)
async def get_report_text(
    db: Session = Depends(get_db),
    sources: UtilitySources = Depends(get_utility_sources),
    app_settings: Settings = Depends(get_settings),
) -> str:
    """The report as chat message text."""
    return format_report(await _fetch_report(sources, db, app_settings))


@router.get("/payments", response_class=PlainTextResponse)
async def get_payments_text(
    db: Session = Depends(get_db),
    sources: UtilitySources = Depends(get_utility_sources),
    app_settings: Settings = Depends(get_settings),
) -> str:
    """Outstanding invoices as chat message text."""
    return format_payments(await _fetch_report(sources, db, app_settings))


@router.post("/email")
async def email_report(
    db: Session = Depends(get_db),
    sources: UtilitySources = Depends(get_utility_sources),
    app_settings: Settings = Depends(get_settings),
) -> dict[str, str]:
    """Send the monthly report email."""
    data = await _fetch_report(sources, db, app_settings)
    try:
        message_id = await send_monthly_report(app_settings, data)
    except EmailError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e)) from e
    return {"status": "sent", "id": message_id}
