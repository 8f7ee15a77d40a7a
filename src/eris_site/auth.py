"""In-memory visitor sessions and single-use OAuth states."""

import hmac
import secrets
import time
from dataclasses import dataclass
from typing import Any

COOKIE_NAME = "eris_session"
SESSION_TTL = 6 * 3600
STATE_TTL = 600


@dataclass(frozen=True, slots=True)
class Session:
    user: dict[str, Any]
    access_token: str
    created_at: float

    @property
    def display_name(self) -> str:
        return str(self.user.get("global_name") or self.user.get("username") or "")


class SessionStore:
    """Sessions keyed by an opaque cookie token; expired entries are swept on access."""

    def __init__(self, ttl: float = SESSION_TTL) -> None:
        self._ttl = ttl
        self._sessions: dict[str, Session] = {}

    def create(self, user: dict[str, Any], access_token: str) -> str:
        token = secrets.token_urlsafe(32)
        self._sessions[token] = Session(user=user, access_token=access_token, created_at=time.time())
        return token

    def get(self, token: str | None) -> Session | None:
        if not token:
            return None
        self._sweep()
        return self._sessions.get(token)

    def drop(self, token: str | None) -> None:
        if token:
            self._sessions.pop(token, None)

    def _sweep(self) -> None:
        cutoff = time.time() - self._ttl
        for token in [t for t, s in self._sessions.items() if s.created_at < cutoff]:
            del self._sessions[token]

    def __len__(self) -> int:
        return len(self._sessions)


class StateStore:
    """OAuth ``state`` values: issued on /login, consumed once on callback."""

    def __init__(self, ttl: float = STATE_TTL) -> None:
        self._ttl = ttl
        self._states: dict[str, tuple[float, str]] = {}

    def issue(self, next_path: str = "/") -> str:
        state = secrets.token_urlsafe(24)
        self._states[state] = (time.time(), next_path)
        return state

    def consume(self, state: str) -> str | None:
        """Returns the stored next path, or None for unknown/expired states."""
        entry = self._states.pop(state, None)
        if entry is None:
            return None
        issued_at, next_path = entry
        if time.time() - issued_at > self._ttl:
            return None
        return next_path


def sanitize_next_path(raw: str) -> str:
    """Only same-site absolute paths; anything else becomes ``/``."""
    if not raw.startswith("/") or raw.startswith("//") or "\\" in raw:
        return "/"
    return raw


def verify_bearer(auth_header: str, secret: str) -> bool:
    """Constant-time comparison of Bearer token."""
    expected = f"Bearer {secret}"
    return hmac.compare_digest(auth_header, expected)
