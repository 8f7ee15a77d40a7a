"""Tests for stats.py — bot stats endpoint client."""

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from eris_site.stats import BotStats, StatsUnavailable, fetch_stats


def _stub_app(status=200, body=None, text=None):
    async def handler(request):
        if text is not None:
            return web.Response(status=status, text=text)
        return web.json_response(body, status=status)

    app = web.Application()
    app.router.add_get("/api/bot-stats", handler)
    return app


async def _fetch(app):
    async with TestServer(app) as server, aiohttp.ClientSession() as http:
        return await fetch_stats(http, str(server.make_url("/api/bot-stats")))


def test_from_dict_defaults():
    stats = BotStats.from_dict({})

    assert stats.status == "unknown"
    assert stats.guild_ids == []
    assert stats.latency is None


def test_to_json_omits_missing_latency():
    assert "latency" not in BotStats(servers=1).to_json()
    assert BotStats(latency="42ms").to_json()["latency"] == "42ms"


@pytest.mark.asyncio
async def test_fetch_stats_ok():
    body = {
        "servers": 12,
        "users": 3400,
        "uptime": "3d 4h",
        "status": "online",
        "guild_ids": [1, "2"],
        "latency": "41ms",
    }

    stats = await _fetch(_stub_app(body=body))

    assert stats.servers == 12
    assert stats.users == 3400
    assert stats.status == "online"
    assert stats.guild_ids == ["1", "2"]
    assert stats.latency == "41ms"


@pytest.mark.asyncio
async def test_fetch_stats_error_status():
    with pytest.raises(StatsUnavailable):
        await _fetch(_stub_app(status=500, body={"error": "down"}))


@pytest.mark.asyncio
async def test_fetch_stats_invalid_json():
    with pytest.raises(StatsUnavailable):
        await _fetch(_stub_app(text="<html>oops</html>"))


@pytest.mark.asyncio
async def test_fetch_stats_non_object():
    with pytest.raises(StatsUnavailable):
        await _fetch(_stub_app(body=[1, 2, 3]))


@pytest.mark.asyncio
async def test_fetch_stats_malformed_counts():
    with pytest.raises(StatsUnavailable):
        await _fetch(_stub_app(body={"servers": "many"}))


@pytest.mark.asyncio
async def test_fetch_stats_unreachable(unused_tcp_port):
    async with aiohttp.ClientSession() as http:
        with pytest.raises(StatsUnavailable):
            await fetch_stats(http, f"http://127.0.0.1:{unused_tcp_port}/api/bot-stats")
