"""Chat bot webhook route."""

import base64
import binascii

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_chat_bot
from app.core.database import get_db
from app.schemas.bot import BotReply, IncomingMessage
from app.services.bot import ChatBot

router = APIRouter(prefix="/bot", tags=["bot"])


@router.post("/messages", response_model=BotReply)
async def handle_message(
    message: IncomingMessage,
    request: Request,
    db: Session = Depends(get_db),
    bot: ChatBot = Depends(get_chat_bot),
) -> BotReply:
    """Handle a group message and return the text to post back, if any."""
    image = None
    if message.image_base64:
        try:
            image = base64.b64decode(message.image_base64, validate=True)
        except binascii.Error as e:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="image_base64 is not valid base64",
            ) from e

    reply = await bot.handle(db, message.sender, message.text, image, message.image_mime_type)
    request.app.state.bot_last_sent = bot.last_sent
    return BotReply(reply=reply)


@router.post("/schedule", response_model=BotReply)
async def run_schedule(
    request: Request,
    db: Session = Depends(get_db),
    bot: ChatBot = Depends(get_chat_bot),
) -> BotReply:
    """Called periodically by the scheduler; returns the report when it is due."""
    reply = await bot.scheduled_report(db)
    request.app.state.bot_last_sent = bot.last_sent
    return BotReply(reply=reply)
