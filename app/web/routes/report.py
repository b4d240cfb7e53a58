"""Monthly report web page."""

from datetime import datetime

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from app.api.dependencies import get_settings, get_utility_sources
from app.core.config import Settings
from app.core.database import get_db
from app.services.providers import UtilitySources
from app.services.report import fetch_all_data
from app.web.template_config import templates

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
async def report_page(
    request: Request,
    db: Session = Depends(get_db),
    sources: UtilitySources = Depends(get_utility_sources),
    app_settings: Settings = Depends(get_settings),
) -> HTMLResponse:
    """Render the monthly report, the same page that is emailed."""
    data = await fetch_all_data(sources, db, app_settings)
    return templates.TemplateResponse(
        request,
        "email/monthly_report.html",
        {"report": data, "generated_at": datetime.now()},
    )
