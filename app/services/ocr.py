"""Meter photo reading through the Gemini vision API."""

import base64
import logging
import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

import httpx

from app.core.config import Settings

logger = logging.getLogger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

PROMPT = """Analyze this image of an electricity meter.
Extract the current reading from the meter (the number displayed).
Respond ONLY with the reading number, no additional text.
If you cannot read the number clearly, respond with "UNREADABLE".
Example response: 6294.8"""

_NUMBER = re.compile(r"^\d+(?:[.,]\d+)?$")


@dataclass
class OcrResult:
    success: bool
    text: str | None = None
    reading: Decimal | None = None
    error: str | None = None


def parse_reading(text: str) -> Decimal | None:
    """Parse the model's answer into a reading; None when it is not a plain number."""
    cleaned = text.strip().replace(" ", "")
    if not _NUMBER.match(cleaned):
        return None
    try:
        return Decimal(cleaned.replace(",", "."))
    except InvalidOperation:
        return None


async def extract_meter_reading(
    settings: Settings,
    image: bytes,
    mime_type: str = "image/jpeg",
    client: httpx.AsyncClient | None = None,
) -> OcrResult:
    """Read the counter value from a meter photo.

    Failures are reported in the result rather than raised, so the bot can
    answer the group with a fallback message.
    """
    if not settings.GEMINI_API_KEY:
        return OcrResult(success=False, error="GEMINI_API_KEY not configured")

    payload = {
        "contents": [
            {
                "role": "user",
                "parts": [
                    {"text": PROMPT},
                    {
                        "inline_data": {
                            "mime_type": mime_type,
                            "data": base64.b64encode(image).decode("ascii"),
                        }
                    },
                ],
            }
        ]
    }

    owns_client = client is None
    client = client or httpx.AsyncClient(timeout=settings.PROVIDER_TIMEOUT)
    try:
        response = await client.post(
            GEMINI_URL.format(model=settings.GEMINI_MODEL),
            json=payload,
            headers={"x-goog-api-key": settings.GEMINI_API_KEY},
        )
        response.raise_for_status()
        body = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error("Gemini request failed: %s", e)
        return OcrResult(success=False, error=str(e))
    finally:
        if owns_client:
            await client.aclose()

    try:
        text = body["candidates"][0]["content"]["parts"][0]["text"].strip()
    except (KeyError, IndexError, TypeError):
        return OcrResult(success=False, error="No response from Gemini")

    if not text or text.upper() == "UNREADABLE":
        return OcrResult(success=False, text=text, error="Could not read the meter")

    reading = parse_reading(text)
    if reading is None:
        return OcrResult(success=False, text=text, error=f"Unexpected answer: {text}")
    return OcrResult(success=True, text=text, reading=reading)
