"""aiohttp application: pages, JSON API, OAuth flow and server lifecycle."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import aiohttp
from aiohttp import web

from eris_site import config, pages
from eris_site.auth import (
    COOKIE_NAME,
    SESSION_TTL,
    Session,
    SessionStore,
    StateStore,
    sanitize_next_path,
    verify_bearer,
)
from eris_site.commands import (
    Command,
    categories,
    command_to_json,
    filter_commands,
    load_commands,
)
from eris_site.config import SiteConfig, load_site_config
from eris_site.discord_api import (
    DISCORD_API_BASE,
    DiscordAPIError,
    GuildScopeError,
    build_authorize_url,
    exchange_code,
    fetch_bot_guild_ids,
    fetch_user,
    fetch_user_guilds,
    mutual_guilds,
)
from eris_site.embed_types import (
    MAX_BUTTONS,
    ButtonLimitError,
    EmbedDescription,
    description_from_dict,
    description_to_dict,
)
from eris_site.embeds import message_payload
from eris_site.script import encode_script, inspect_script
from eris_site.stats import StatsUnavailable, fetch_stats
from eris_site.transcripts import (
    TranscriptError,
    create_transcript,
    get_transcript,
    validate_create_request,
)

log = logging.getLogger(__name__)

_MAX_PAYLOAD_SIZE = 5 * 1024 * 1024  # transcripts with long histories

_KEY_SITE = web.AppKey("site", SiteConfig)
_KEY_HTTP = web.AppKey("http", aiohttp.ClientSession)
_KEY_SESSIONS = web.AppKey("sessions", SessionStore)
_KEY_STATES = web.AppKey("states", StateStore)
_KEY_COMMANDS = web.AppKey("commands", list)
_KEY_STATS_URL = web.AppKey("stats_url", str)
_KEY_API_BASE = web.AppKey("api_base", str)
_KEY_TRANSCRIPT_SECRET = web.AppKey("transcript_secret")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _session(request: web.Request) -> Session | None:
    return request.app[_KEY_SESSIONS].get(request.cookies.get(COOKIE_NAME))


def _user_name(request: web.Request) -> str | None:
    session = _session(request)
    return session.display_name if session else None


def _html(text: str, status: int = 200) -> web.Response:
    return web.Response(text=text, status=status, content_type="text/html")


def _is_https(request: web.Request) -> bool:
    forwarded = request.headers.get("X-Forwarded-Proto", "")
    if forwarded:
        return forwarded.split(",")[0].strip().lower() == "https"
    return request.secure


_FORM_TEXT_FIELDS = (
    "content",
    "title",
    "description",
    "author_name",
    "author_icon",
    "thumbnail_url",
    "image_url",
    "footer_text",
    "footer_icon",
)


def _checked(form: Mapping[str, Any], name: str) -> bool:
    return str(form.get(name, "")).lower() in ("on", "true", "1")


def description_from_form(form: Mapping[str, Any]) -> EmbedDescription:
    """Builder form -> description. Unlabeled button rows are dropped."""
    buttons: list[dict[str, Any]] = []
    for index in range(MAX_BUTTONS):
        prefix = f"button-{index}"
        label = str(form.get(f"{prefix}-label", "")).strip()
        if not label:
            continue
        buttons.append(
            {
                "label": label,
                "style": form.get(f"{prefix}-style"),
                "url": str(form.get(f"{prefix}-url", "")).strip(),
                "emoji": str(form.get(f"{prefix}-emoji", "")).strip(),
                "row": form.get(f"{prefix}-row", 0),
                "disabled": _checked(form, f"{prefix}-disabled"),
            }
        )
    data: dict[str, Any] = {
        # Browsers submit textarea newlines as CRLF
        name: str(form.get(name, "")).replace("\r\n", "\n")
        for name in _FORM_TEXT_FIELDS
    }
    data["color"] = str(form.get("color", "")).strip()
    data["timestamp"] = _checked(form, "timestamp")
    data["buttons"] = buttons
    return description_from_dict(data)


async def _read_json(request: web.Request) -> Any:
    try:
        return await request.json()
    except ValueError as exc:
        raise web.HTTPBadRequest(
            text='{"error": "invalid json"}', content_type="application/json"
        ) from exc


# ---------------------------------------------------------------------------
# Pages
# ---------------------------------------------------------------------------


async def _handle_index(request: web.Request) -> web.Response:
    return _html(pages.landing_page(request.app[_KEY_SITE], user=_user_name(request)))


async def _handle_commands(request: web.Request) -> web.Response:
    commands: list[Command] = request.app[_KEY_COMMANDS]
    search = request.query.get("q", "").strip()
    category = request.query.get("category", "all").strip() or "all"
    return _html(
        pages.commands_page(
            request.app[_KEY_SITE],
            filter_commands(commands, search, category),
            all_commands=commands,
            categories=categories(commands),
            search=search,
            category=category,
            user=_user_name(request),
        )
    )


async def _handle_status(request: web.Request) -> web.Response:
    return _html(pages.status_page(request.app[_KEY_SITE], user=_user_name(request)))


async def _handle_faq(request: web.Request) -> web.Response:
    return _html(pages.faq_page(request.app[_KEY_SITE], user=_user_name(request)))


async def _handle_discord(request: web.Request) -> web.Response:
    raise web.HTTPFound(request.app[_KEY_SITE].support_server)


async def _handle_builder(request: web.Request) -> web.Response:
    description = EmbedDescription()
    return _html(
        pages.embed_builder_page(
            request.app[_KEY_SITE],
            description,
            encode_script(description),
            user=_user_name(request),
        )
    )


async def _handle_builder_post(request: web.Request) -> web.Response:
    form = await request.post()
    notice = ""
    if form.get("action") == "import":
        report = inspect_script(str(form.get("script", "")))
        description = report.description
        if not report.has_embed:
            notice = "No embed marker found; unmatched fields were left at their defaults."
        elif report.dropped_buttons:
            notice = f"Imported script; {report.dropped_buttons} button(s) were skipped."
        else:
            notice = "Imported script."
    else:
        description = description_from_form(form)
    return _html(
        pages.embed_builder_page(
            request.app[_KEY_SITE],
            description,
            encode_script(description),
            notice=notice,
            user=_user_name(request),
        )
    )


async def _handle_transcript_page(request: web.Request) -> web.Response:
    site = request.app[_KEY_SITE]
    transcript_id = request.match_info["id"]
    try:
        transcript = get_transcript(transcript_id)
    except OSError:
        log.exception("Error reading transcript %s", transcript_id)
        return _html(pages.error_page(site, "Error", "Failed to load transcript"), status=500)
    if transcript is None:
        return _html(
            pages.error_page(site, "Transcript not found", f"No transcript with id {transcript_id}"),
            status=404,
        )
    return _html(pages.transcript_page(site, transcript, user=_user_name(request)))


async def _handle_site_config(request: web.Request) -> web.Response:
    return web.json_response(request.app[_KEY_SITE].to_json())


async def _handle_health(_request: web.Request) -> web.Response:
    return web.json_response({"status": "ok"})


# ---------------------------------------------------------------------------
# JSON API
# ---------------------------------------------------------------------------


async def _handle_script_encode(request: web.Request) -> web.Response:
    data = await _read_json(request)
    if not isinstance(data, dict):
        return web.json_response({"error": "expected a JSON object"}, status=400)
    try:
        description = description_from_dict(data)
    except ButtonLimitError as exc:
        return web.json_response({"error": str(exc)}, status=400)
    except ValueError as exc:
        return web.json_response({"error": f"invalid description: {exc}"}, status=400)
    return web.json_response({"script": encode_script(description)})


async def _handle_script_decode(request: web.Request) -> web.Response:
    data = await _read_json(request)
    script = data.get("script") if isinstance(data, dict) else None
    if not isinstance(script, str):
        return web.json_response({"error": "script must be a string"}, status=400)
    report = inspect_script(script)
    return web.json_response(
        {
            "description": description_to_dict(report.description),
            "missing": list(report.missing),
            "dropped_buttons": report.dropped_buttons,
            "has_embed": report.has_embed,
        }
    )


async def _handle_embed_preview(request: web.Request) -> web.Response:
    data = await _read_json(request)
    if not isinstance(data, dict):
        return web.json_response({"error": "expected a JSON object"}, status=400)
    try:
        description = description_from_dict(data)
    except ValueError as exc:
        return web.json_response({"error": str(exc)}, status=400)
    return web.json_response(message_payload(description))


async def _handle_transcript_create(request: web.Request) -> web.Response:
    secret: str | None = request.app[_KEY_TRANSCRIPT_SECRET]
    if secret and not verify_bearer(request.headers.get("Authorization", ""), secret):
        return web.json_response({"success": False, "error": "unauthorized"}, status=401)

    try:
        data = await request.json()
    except ValueError:
        return web.json_response({"success": False, "error": "invalid json"}, status=400)

    errors = validate_create_request(data)
    if errors:
        return web.json_response(
            {"success": False, "error": "Missing required fields", "details": errors},
            status=400,
        )

    try:
        transcript = create_transcript(data)
    except (OSError, TranscriptError):
        log.exception("Error creating transcript")
        return web.json_response(
            {"success": False, "error": "Failed to create transcript"}, status=500
        )

    base_url = (request.headers.get("Origin") or config.BASE_URL).rstrip("/")
    return web.json_response(
        {
            "success": True,
            "id": transcript["id"],
            "url": f"{base_url}/transcripts/{transcript['id']}",
        }
    )


async def _handle_transcript_get(request: web.Request) -> web.Response:
    transcript_id = request.match_info["id"]
    try:
        transcript = get_transcript(transcript_id)
    except OSError:
        log.exception("Error fetching transcript %s", transcript_id)
        return web.json_response({"error": "Failed to fetch transcript"}, status=500)
    if transcript is None:
        return web.json_response({"error": "Transcript not found"}, status=404)
    return web.json_response(transcript)


async def _handle_stats(request: web.Request) -> web.Response:
    try:
        stats = await fetch_stats(request.app[_KEY_HTTP], request.app[_KEY_STATS_URL])
    except StatsUnavailable:
        log.exception("Failed to fetch bot stats")
        return web.json_response({"error": "Failed to fetch stats"}, status=503)
    return web.json_response(stats.to_json())


async def _handle_commands_api(request: web.Request) -> web.Response:
    commands: list[Command] = request.app[_KEY_COMMANDS]
    matched = filter_commands(
        commands,
        request.query.get("q", "").strip(),
        request.query.get("category", "all").strip() or "all",
    )
    return web.json_response([command_to_json(c) for c in matched])


async def _handle_me(request: web.Request) -> web.Response:
    session = _session(request)
    if session is None:
        return web.json_response({"error": "Not authenticated"}, status=401)
    return web.json_response(
        {
            "id": session.user.get("id"),
            "name": session.display_name,
            "avatar": session.user.get("avatar"),
        }
    )


async def _handle_guilds(request: web.Request) -> web.Response:
    session = _session(request)
    if session is None:
        return web.json_response({"error": "Not authenticated"}, status=401)

    http = request.app[_KEY_HTTP]
    try:
        user_guilds = await fetch_user_guilds(
            http, session.access_token, api_base=request.app[_KEY_API_BASE]
        )
        bot_guild_ids = await fetch_bot_guild_ids(http, request.app[_KEY_STATS_URL])
    except GuildScopeError:
        return web.json_response(
            {"error": "Missing guilds scope", "code": "guild_scope"}, status=403
        )
    except (DiscordAPIError, aiohttp.ClientError, ValueError):
        log.exception("Failed to fetch guilds")
        return web.json_response({"error": "Failed to fetch guilds"}, status=500)
    return web.json_response(mutual_guilds(user_guilds, bot_guild_ids))


# ---------------------------------------------------------------------------
# OAuth
# ---------------------------------------------------------------------------


async def _handle_login(request: web.Request) -> web.Response:
    next_path = sanitize_next_path(request.query.get("next", "/"))
    state = request.app[_KEY_STATES].issue(next_path)
    raise web.HTTPFound(
        build_authorize_url(
            client_id=config.DISCORD_CLIENT_ID,
            redirect_uri=config.REDIRECT_URI,
            state=state,
        )
    )


async def _handle_oauth_callback(request: web.Request) -> web.Response:
    site = request.app[_KEY_SITE]
    code = request.query.get("code", "").strip()
    state = request.query.get("state", "").strip()
    if not code or not state:
        return _html(pages.error_page(site, "Login failed", "Missing code or state."), status=400)

    next_path = request.app[_KEY_STATES].consume(state)
    if next_path is None:
        return _html(pages.error_page(site, "Login failed", "Invalid or expired state."), status=400)

    http = request.app[_KEY_HTTP]
    api_base = request.app[_KEY_API_BASE]
    try:
        token = await exchange_code(
            http,
            client_id=config.DISCORD_CLIENT_ID,
            client_secret=config.DISCORD_CLIENT_SECRET,
            redirect_uri=config.REDIRECT_URI,
            code=code,
            api_base=api_base,
        )
        access_token = str(token.get("access_token") or "")
        if not access_token:
            raise DiscordAPIError(400, "no access_token in token response")
        user = await fetch_user(http, access_token, api_base=api_base)
    except (DiscordAPIError, aiohttp.ClientError, ValueError):
        log.exception("OAuth callback failed")
        return _html(pages.error_page(site, "Login failed", "Discord login failed."), status=502)

    session_token = request.app[_KEY_SESSIONS].create(user, access_token)
    log.info("Visitor %s logged in", user.get("id"))
    resp = web.HTTPFound(sanitize_next_path(next_path))
    resp.set_cookie(
        COOKIE_NAME,
        session_token,
        httponly=True,
        samesite="Lax",
        secure=_is_https(request),
        max_age=SESSION_TTL,
    )
    raise resp


async def _handle_logout(request: web.Request) -> web.Response:
    request.app[_KEY_SESSIONS].drop(request.cookies.get(COOKIE_NAME))
    resp = web.HTTPFound("/")
    resp.del_cookie(COOKIE_NAME)
    raise resp


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------


async def _open_http(app: web.Application) -> None:
    # ClientSession must be created with a running event loop
    app[_KEY_HTTP] = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=15))


async def _close_http(app: web.Application) -> None:
    http = app.get(_KEY_HTTP)
    if http is not None:
        await http.close()


def create_app(
    *,
    site: SiteConfig | None = None,
    commands: list[Command] | None = None,
    stats_url: str | None = None,
    api_base: str = DISCORD_API_BASE,
    transcript_secret: str | None = None,
) -> web.Application:
    """Create the aiohttp application for the site."""
    app = web.Application(client_max_size=_MAX_PAYLOAD_SIZE)
    app[_KEY_SITE] = site or load_site_config()
    if commands is None:
        commands = load_commands(Path(config.COMMANDS_FILE)) if config.COMMANDS_FILE else load_commands()
    app[_KEY_COMMANDS] = commands
    app[_KEY_STATS_URL] = stats_url or config.STATS_URL
    app[_KEY_API_BASE] = api_base
    app[_KEY_TRANSCRIPT_SECRET] = transcript_secret or config.TRANSCRIPT_SECRET
    app[_KEY_SESSIONS] = SessionStore()
    app[_KEY_STATES] = StateStore()
    app.on_startup.append(_open_http)
    app.on_cleanup.append(_close_http)

    static_dir = config.DATA_DIR / "static"
    if static_dir.is_dir():
        app.router.add_static("/static/", path=str(static_dir), name="static")

    app.router.add_get("/", _handle_index)
    app.router.add_get("/commands", _handle_commands)
    app.router.add_get("/status", _handle_status)
    app.router.add_get("/faq", _handle_faq)
    app.router.add_get("/discord", _handle_discord)
    app.router.add_get("/embed-builder", _handle_builder)
    app.router.add_post("/embed-builder", _handle_builder_post)
    app.router.add_get("/transcripts/{id}", _handle_transcript_page)
    app.router.add_get("/siteconfig.json", _handle_site_config)
    app.router.add_get("/health", _handle_health)
    app.router.add_get("/login", _handle_login)
    app.router.add_get("/oauth/callback", _handle_oauth_callback)
    app.router.add_get("/logout", _handle_logout)
    app.router.add_post("/api/script/encode", _handle_script_encode)
    app.router.add_post("/api/script/decode", _handle_script_decode)
    app.router.add_post("/api/embed/preview", _handle_embed_preview)
    app.router.add_post("/api/transcripts/create", _handle_transcript_create)
    app.router.add_get("/api/transcripts/{id}", _handle_transcript_get)
    app.router.add_get("/api/stats", _handle_stats)
    app.router.add_get("/api/commands", _handle_commands_api)
    app.router.add_get("/api/guilds", _handle_guilds)
    app.router.add_get("/api/me", _handle_me)
    return app


# ---------------------------------------------------------------------------
# Server lifecycle
# ---------------------------------------------------------------------------

_runner: web.AppRunner | None = None


async def start(host: str, port: int) -> None:
    global _runner  # noqa: PLW0603
    _runner = web.AppRunner(create_app())
    await _runner.setup()
    site = web.TCPSite(_runner, host, port)
    await site.start()
    log.info("Site server started on %s:%d", host, port)


async def stop() -> None:
    """Graceful shutdown of the site server."""
    global _runner  # noqa: PLW0603
    if _runner:
        await _runner.cleanup()
        _runner = None
        log.info("Site server stopped")
