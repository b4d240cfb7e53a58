"""Web routes package."""

from fastapi import APIRouter

from app.web.routes import report

web_router = APIRouter()

web_router.include_router(report.router, prefix="/report", tags=["web-report"])
