"""Chat bot webhook schemas."""

from pydantic import BaseModel


class IncomingMessage(BaseModel):
    """A group message delivered by the chat transport."""

    sender: str
    text: str = ""
    image_base64: str | None = None
    image_mime_type: str = "image/jpeg"


class BotReply(BaseModel):
    """Text to post back to the group, or None when the message is not a command."""

    reply: str | None
