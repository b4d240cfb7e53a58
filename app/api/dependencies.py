"""API dependencies for configuration, utility sources and the chat bot."""

from collections.abc import AsyncIterator

from fastapi import Depends, Request

from app.core.config import Settings, settings
from app.services.bot import ChatBot
from app.services.providers import UtilitySources


def get_settings() -> Settings:
    """Application settings."""
    return settings


async def get_utility_sources(
    app_settings: Settings = Depends(get_settings),
) -> AsyncIterator[UtilitySources]:
    """Provider clients for one request, closed afterwards."""
    sources = UtilitySources.from_settings(app_settings)
    try:
        yield sources
    finally:
        await sources.aclose()


def get_chat_bot(
    request: Request,
    app_settings: Settings = Depends(get_settings),
    sources: UtilitySources = Depends(get_utility_sources),
) -> ChatBot:
    """Chat bot for one webhook call; the last scheduled send is kept on app state."""
    bot = ChatBot(app_settings, sources)
    bot.last_sent = getattr(request.app.state, "bot_last_sent", None)
    return bot
