"""Client for the bot's read-only stats endpoint."""

from dataclasses import dataclass, field
from typing import Any

import aiohttp

STATS_POLL_SECONDS = 30
_TIMEOUT = aiohttp.ClientTimeout(total=10)


class StatsUnavailable(Exception):
    """The stats endpoint could not be reached or answered with an error."""


@dataclass(frozen=True, slots=True)
class BotStats:
    servers: int = 0
    users: int = 0
    uptime: str = ""
    status: str = "unknown"
    guild_ids: list[str] = field(default_factory=list)
    latency: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BotStats":
        latency = data.get("latency")
        return cls(
            servers=int(data.get("servers") or 0),
            users=int(data.get("users") or 0),
            uptime=str(data.get("uptime") or ""),
            status=str(data.get("status") or "unknown"),
            guild_ids=[str(g) for g in data.get("guild_ids") or []],
            latency=str(latency) if latency is not None else None,
        )

    def to_json(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "servers": self.servers,
            "users": self.users,
            "uptime": self.uptime,
            "status": self.status,
            "guild_ids": self.guild_ids,
        }
        if self.latency is not None:
            data["latency"] = self.latency
        return data


async def fetch_stats(http: aiohttp.ClientSession, url: str) -> BotStats:
    try:
        async with http.get(url, timeout=_TIMEOUT) as resp:
            if resp.status >= 400:
                raise StatsUnavailable(f"stats endpoint returned {resp.status}")
            data = await resp.json(content_type=None)
    except (aiohttp.ClientError, TimeoutError, ValueError) as exc:
        raise StatsUnavailable(str(exc)) from exc
    if not isinstance(data, dict):
        raise StatsUnavailable("stats endpoint returned non-object JSON")
    try:
        return BotStats.from_dict(data)
    except (TypeError, ValueError) as exc:
        raise StatsUnavailable(f"malformed stats: {exc}") from exc
