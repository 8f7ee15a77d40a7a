"""Flat-file storage for support ticket transcripts posted by the bot."""

import json
import logging
import os
import re
import secrets
import tempfile
import time
from datetime import datetime, timezone
from typing import Any, NotRequired, TypedDict

from jsonschema import Draft7Validator

from eris_site.config import DATA_DIR

log = logging.getLogger(__name__)

TRANSCRIPTS_DIR = DATA_DIR / "transcripts"

_ID_RE = re.compile(r"^[0-9a-z-]{1,64}$")
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


class TranscriptUser(TypedDict):
    id: str
    username: str
    avatar_url: str
    discriminator: NotRequired[str]
    bot: NotRequired[bool]


class TranscriptMessage(TypedDict):
    id: str
    author: TranscriptUser
    content: str
    timestamp: str
    attachments: NotRequired[list[dict[str, Any]]]
    embeds: NotRequired[list[dict[str, Any]]]
    edited_timestamp: NotRequired[str]


class TranscriptMetadata(TypedDict):
    ticket_id: str
    guild_id: str
    channel_id: str
    channel_name: str
    creator: TranscriptUser
    created_at: str
    closed_at: str
    message_count: int
    guild_name: NotRequired[str]
    category: NotRequired[str]
    closed_by: NotRequired[TranscriptUser]
    participants: NotRequired[list[TranscriptUser]]


class Transcript(TypedDict):
    id: str
    metadata: TranscriptMetadata
    messages: list[TranscriptMessage]
    created_at: str


class TranscriptError(Exception):
    """Storage failure while writing or deleting a transcript."""


# Only the envelope is enforced; message and metadata contents are rendered
# as-is, so their inner shape is the bot's business.
CREATE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["ticket_id", "messages", "metadata"],
    "properties": {
        "ticket_id": {"type": ["string", "integer"], "minLength": 1},
        "messages": {"type": "array", "items": {"type": "object"}},
        "metadata": {"type": "object"},
    },
}


def validate_create_request(data: Any) -> list[str]:
    """Validate a create payload. Returns list of error messages."""
    validator = Draft7Validator(CREATE_SCHEMA)
    return [err.message for err in validator.iter_errors(data)]


def _base36(n: int) -> str:
    digits = ""
    while n:
        n, rem = divmod(n, 36)
        digits = _BASE36[rem] + digits
    return digits or "0"


def generate_transcript_id() -> str:
    """Millisecond timestamp in base36 plus 7 random chars; unique, not secret."""
    timestamp = _base36(int(time.time() * 1000))
    suffix = "".join(secrets.choice(_BASE36) for _ in range(7))
    return f"{timestamp}-{suffix}"


def is_valid_id(transcript_id: str) -> bool:
    return bool(_ID_RE.match(transcript_id))


def store_transcript(transcript_id: str, transcript: Transcript) -> None:
    """Atomic write (temp file + rename)."""
    if not is_valid_id(transcript_id):
        raise TranscriptError(f"invalid transcript id: {transcript_id!r}")
    TRANSCRIPTS_DIR.mkdir(parents=True, exist_ok=True)
    target = TRANSCRIPTS_DIR / f"{transcript_id}.json"
    fd, tmp = tempfile.mkstemp(dir=TRANSCRIPTS_DIR, suffix=".tmp")
    try:
        os.write(fd, json.dumps(transcript, indent=2).encode())
    finally:
        os.close(fd)
    os.replace(tmp, target)


def get_transcript(transcript_id: str) -> Transcript | None:
    """Returns None for unknown, malformed-id and corrupt transcripts."""
    if not is_valid_id(transcript_id):
        return None
    filepath = TRANSCRIPTS_DIR / f"{transcript_id}.json"
    if not filepath.exists():
        return None
    try:
        return json.loads(filepath.read_text())
    except (json.JSONDecodeError, UnicodeDecodeError):
        log.warning("Skipping corrupt transcript: %s", filepath)
        return None


def list_transcripts() -> list[Transcript]:
    if not TRANSCRIPTS_DIR.is_dir():
        return []
    result: list[Transcript] = []
    for filepath in sorted(TRANSCRIPTS_DIR.glob("*.json")):
        transcript = get_transcript(filepath.stem)
        if transcript is not None:
            result.append(transcript)
    return result


def delete_transcript(transcript_id: str) -> bool:
    if not is_valid_id(transcript_id):
        return False
    filepath = TRANSCRIPTS_DIR / f"{transcript_id}.json"
    if not filepath.exists():
        return False
    filepath.unlink()
    return True


def create_transcript(data: dict[str, Any]) -> Transcript:
    """Build and store a transcript from a validated create payload."""
    transcript_id = generate_transcript_id()
    messages = data["messages"]
    transcript: Transcript = {
        "id": transcript_id,
        "metadata": {**data["metadata"], "message_count": len(messages)},
        "messages": messages,
        "created_at": datetime.now(timezone.utc).isoformat(),
    }
    store_transcript(transcript_id, transcript)
    log.info("Stored transcript %s for ticket %s", transcript_id, data["ticket_id"])
    return transcript
