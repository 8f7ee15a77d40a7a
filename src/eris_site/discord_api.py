"""Discord REST calls: OAuth token exchange, current user, and mutual guilds."""

from __future__ import annotations

import asyncio
import logging
import urllib.parse
from typing import Any

import aiohttp

from eris_site.stats import StatsUnavailable, fetch_stats

log = logging.getLogger(__name__)

DISCORD_API_BASE = "https://discord.com/api"
AUTHORIZE_URL = "https://discord.com/oauth2/authorize"
OAUTH_SCOPE = "identify guilds"

_MAX_ATTEMPTS = 3


class DiscordAPIError(Exception):
    def __init__(self, status: int, message: str) -> None:
        super().__init__(f"Discord API error ({status}): {message}")
        self.status = status


class GuildScopeError(DiscordAPIError):
    """The access token was not granted the ``guilds`` scope."""


def build_authorize_url(*, client_id: str, redirect_uri: str, state: str) -> str:
    query = urllib.parse.urlencode(
        {
            "client_id": client_id,
            "redirect_uri": redirect_uri,
            "response_type": "code",
            "scope": OAUTH_SCOPE,
            "state": state,
            "prompt": "none",
        }
    )
    return f"{AUTHORIZE_URL}?{query}"


async def _get_json(
    http: aiohttp.ClientSession, path: str, *, access_token: str, api_base: str
) -> Any:
    """GET with bearer auth; sleeps through 429s, raises DiscordAPIError otherwise."""
    headers = {"Authorization": f"Bearer {access_token}"}
    url = f"{api_base}{path}"
    for _ in range(_MAX_ATTEMPTS):
        async with http.get(url, headers=headers) as resp:
            data = await resp.json(content_type=None)
            if resp.status == 429 and isinstance(data, dict):
                retry_after = float(data.get("retry_after") or 1.0)
                log.warning("Discord rate limited %s, retrying in %.1fs", path, retry_after)
                await asyncio.sleep(retry_after)
                continue
            if resp.status >= 400:
                raise DiscordAPIError(resp.status, str(data))
            return data
    raise DiscordAPIError(429, f"still rate limited after {_MAX_ATTEMPTS} attempts")


async def exchange_code(
    http: aiohttp.ClientSession,
    *,
    client_id: str,
    client_secret: str,
    redirect_uri: str,
    code: str,
    api_base: str = DISCORD_API_BASE,
) -> dict[str, Any]:
    form = {
        "client_id": client_id,
        "client_secret": client_secret,
        "grant_type": "authorization_code",
        "code": code,
        "redirect_uri": redirect_uri,
    }
    async with http.post(f"{api_base}/oauth2/token", data=form) as resp:
        data = await resp.json(content_type=None)
        if resp.status >= 400:
            raise DiscordAPIError(resp.status, f"token exchange failed: {data}")
        return data


async def fetch_user(
    http: aiohttp.ClientSession, access_token: str, *, api_base: str = DISCORD_API_BASE
) -> dict[str, Any]:
    return await _get_json(http, "/users/@me", access_token=access_token, api_base=api_base)


async def fetch_user_guilds(
    http: aiohttp.ClientSession, access_token: str, *, api_base: str = DISCORD_API_BASE
) -> list[dict[str, Any]]:
    """Returns ``{id, name, icon}`` records; 401/403 means the guilds scope is missing."""
    try:
        guilds = await _get_json(
            http, "/users/@me/guilds", access_token=access_token, api_base=api_base
        )
    except DiscordAPIError as exc:
        if exc.status in (401, 403):
            raise GuildScopeError(exc.status, "token lacks the guilds scope") from exc
        raise
    return [
        {"id": str(g.get("id")), "name": g.get("name", ""), "icon": g.get("icon")}
        for g in guilds
        if isinstance(g, dict) and g.get("id") is not None
    ]


async def fetch_bot_guild_ids(http: aiohttp.ClientSession, stats_url: str) -> list[str] | None:
    """None when the bot's stats endpoint is unavailable."""
    try:
        stats = await fetch_stats(http, stats_url)
    except StatsUnavailable:
        log.warning("Bot guild list unavailable, not filtering guilds")
        return None
    return stats.guild_ids


def mutual_guilds(
    user_guilds: list[dict[str, Any]], bot_guild_ids: list[str] | None
) -> list[dict[str, Any]]:
    """Intersect by id in user order; no bot list means no filtering."""
    if bot_guild_ids is None:
        return list(user_guilds)
    bot_ids = set(bot_guild_ids)
    return [g for g in user_guilds if g["id"] in bot_ids]
