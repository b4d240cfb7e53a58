"""FastAPI application entry point."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from app.api.routes import bot, electricity, floors, health, readings, report
from app.core.config import settings
from app.core.database import init_db
from app.core.logging import configure_logging
from app.web.routes import web_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager."""
    configure_logging()
    # Startup: Create database tables
    init_db()
    app.state.bot_last_sent = None
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Monthly utility bills split per floor",
    lifespan=lifespan,
)

# Include API routers
app.include_router(health.router, prefix="/api", tags=["health"])
app.include_router(readings.router, prefix="/api")
app.include_router(floors.router, prefix="/api")
app.include_router(electricity.router, prefix="/api")
app.include_router(report.router, prefix="/api")
app.include_router(bot.router, prefix="/api")

# Include web routes (Jinja2 frontend)
app.include_router(web_router)


@app.get("/", include_in_schema=False)
def root() -> RedirectResponse:
    """Send browsers to the report page."""
    return RedirectResponse("/report/", status_code=307)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
