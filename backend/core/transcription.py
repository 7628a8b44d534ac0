"""
Async client for the backend speech-to-text service.

POSTs the recording as multipart form data and returns the transcript.
Failures surface as TranscriptionError with a message fit to show a user.
"""
import logging
import math
from datetime import datetime, timezone
from typing import Optional

import httpx

from scrapvoice.voice_match.errors import TranscriptionError

from .config import settings

logger = logging.getLogger(__name__)

TRANSCRIBE_PATH = "/api/transcription/transcribe"
DEFAULT_DAILY_LIMIT = 3


def _headers() -> dict:
    headers = {"Accept": "application/json"}
    if settings.BACKEND_API_TOKEN:
        headers["Authorization"] = f"Bearer {settings.BACKEND_API_TOKEN}"
    return headers


def _hours_until(reset_time: Optional[str]) -> int:
    """Whole hours until an ISO timestamp; 24 when unknown."""
    if not reset_time:
        return 24
    try:
        reset = datetime.fromisoformat(reset_time.replace("Z", "+00:00"))
    except ValueError:
        return 24
    if reset.tzinfo is None:
        reset = reset.replace(tzinfo=timezone.utc)
    seconds = (reset - datetime.now(timezone.utc)).total_seconds()
    return max(0, math.ceil(seconds / 3600))


def _error_for_status(resp: httpx.Response) -> str:
    """Map a failed transcription response to a user-facing message."""
    try:
        data = resp.json()
    except ValueError:
        data = {}
    if not isinstance(data, dict):
        data = {}

    if resp.status_code == 429:
        limit = data.get("limit") or DEFAULT_DAILY_LIMIT
        hours = _hours_until(data.get("resetTime"))
        return (f"You've used all {limit} voice transcriptions for today. "
                f"Limit resets in {hours} hours.")
    if resp.status_code == 401:
        return "Authentication required. Please log in again."
    if resp.status_code == 400:
        return "Invalid audio file. Please try recording again."
    return data.get("error") or data.get("message") or f"Transcription failed ({resp.status_code})"


async def transcribe(
    audio: bytes,
    filename: str = "recording.m4a",
    content_type: str = "audio/m4a",
    language: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> str:
    """
    Transcribe recorded audio.

    Args:
        audio: Raw audio bytes
        filename: Name sent with the upload
        content_type: MIME type of the audio
        language: Language hint (defaults to TRANSCRIPTION_LANGUAGE)
        client: Optional shared client (tests pass one with a mock transport)

    Returns:
        The transcript, stripped (may be empty)

    Raises:
        TranscriptionError: If the service is unreachable or rejects the audio
    """
    if not audio:
        raise TranscriptionError("No audio recorded. Please try again.")

    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT_SECONDS)

    try:
        resp = await client.post(
            f"{settings.BACKEND_API_URL.rstrip('/')}{TRANSCRIBE_PATH}",
            headers=_headers(),
            files={"audioFile": (filename, audio, content_type)},
            data={"language": language or settings.TRANSCRIPTION_LANGUAGE},
        )
        if resp.status_code >= 400:
            message = _error_for_status(resp)
            logger.error(f"Transcription failed: {resp.status_code} - {message}")
            raise TranscriptionError(message)
        data = resp.json()
    except httpx.HTTPError as e:
        logger.error(f"Transcription request failed: {e}")
        raise TranscriptionError(f"Transcription failed: {e}") from e
    except ValueError as e:
        raise TranscriptionError(f"Transcription response is not JSON: {e}") from e
    finally:
        if owns_client:
            await client.aclose()

    if not isinstance(data, dict):
        return ""
    usage = data.get("usage")
    if usage:
        logger.info(f"Transcription usage: {usage}")
    return str(data.get("transcription") or "").strip()
