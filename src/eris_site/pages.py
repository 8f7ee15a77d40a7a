"""Server-rendered HTML for the public pages."""

from html import escape
from typing import Any

from eris_site.commands import (
    Command,
    catalog_totals,
    command_types,
    format_arguments,
    format_permissions,
)
from eris_site.config import SiteConfig
from eris_site.embed_types import BUTTON_STYLES, MAX_BUTTONS, EmbedDescription
from eris_site.stats import STATS_POLL_SECONDS
from eris_site.transcripts import Transcript

FAQ: list[tuple[str, str]] = [
    ("How many commands does the bot have?", "See the Commands page for the full, searchable list."),
    ("How do I change the bot's prefix?", "Use the prefix set command with the new prefix."),
    (
        "Why isn't the bot responding to my commands?",
        "Check that the bot can read and send messages in the channel and that you are using the right prefix.",
    ),
    ("How do I report a bug or request a feature?", "Open a ticket in the support server."),
    (
        "Does the bot store my messages?",
        "Only ticket transcripts are stored, and only when a ticket is closed.",
    ),
    ("Is the bot free to use?", "Yes."),
    (
        "What's the difference between ban, hardban, and softban?",
        "Ban removes a member; hardban re-bans them if anyone unbans them; "
        "softban bans and unbans at once to clear their recent messages.",
    ),
]

_STYLE = """
body { font-family: system-ui, sans-serif; background: #000; color: #fff; margin: 0; }
nav { display: flex; gap: 1rem; align-items: center; padding: 1rem 2rem; border-bottom: 1px solid #222; }
nav a { color: #ccc; text-decoration: none; }
nav .brand { font-weight: bold; color: #fff; margin-right: auto; display: flex; gap: .5rem; align-items: center; }
nav img { width: 28px; height: 28px; border-radius: 50%; }
main { max-width: 72rem; margin: 0 auto; padding: 2rem; }
.card { background: #111; border: 1px solid #222; border-radius: .75rem; padding: 1rem 1.25rem; margin-bottom: 1rem; }
.grid { display: grid; grid-template-columns: repeat(auto-fill, minmax(14rem, 1fr)); gap: 1rem; }
.muted { color: #888; }
.tag { display: inline-block; padding: 0 .5rem; border-radius: .5rem; background: #222; font-size: .8rem; }
.embed { border-left: 4px solid; background: #2b2d31; padding: .75rem 1rem; border-radius: .25rem; }
textarea, input, select { background: #111; color: #fff; border: 1px solid #333; border-radius: .4rem; padding: .4rem; }
textarea { width: 100%; }
pre { white-space: pre-wrap; word-break: break-all; }
"""


def _layout(site: SiteConfig, title: str, body: str, *, user: str | None = None) -> str:
    account = (
        f'<span class="muted">{escape(user)}</span> <a href="/logout">Log out</a>'
        if user
        else '<a href="/login">Log in</a>'
    )
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{escape(title)} | {escape(site.bot_name)}</title>
<link rel="icon" href="{escape(site.favicon)}">
<style>{_STYLE}</style>
</head>
<body>
<nav>
<a class="brand" href="/"><img src="{escape(site.bot_logo)}" alt="">{escape(site.bot_name)}</a>
<a href="/commands">Commands</a>
<a href="/embed-builder">Embed Builder</a>
<a href="/status">Status</a>
<a href="/faq">FAQ</a>
<a href="/discord">Support</a>
{account}
</nav>
<main>
{body}
</main>
</body>
</html>
"""


def landing_page(site: SiteConfig, *, user: str | None = None) -> str:
    guilds = ""
    if user:
        # Filled client-side; /api/guilds needs the session cookie
        guilds = """
<h2>Your servers</h2>
<div id="guilds" class="grid"><p class="muted">Loading...</p></div>
<script>
fetch("/api/guilds").then(r => r.json()).then(data => {
  const el = document.getElementById("guilds");
  if (!Array.isArray(data)) { el.textContent = data.error || "Failed to fetch guilds"; return; }
  el.textContent = data.length ? "" : "No shared servers yet.";
  for (const g of data) {
    const card = document.createElement("div");
    card.className = "card";
    card.textContent = g.name;
    el.appendChild(card);
  }
});
</script>"""
    body = f"""
<h1>{escape(site.bot_name)}</h1>
<p class="muted">{escape(site.tagline)}</p>
<p><a class="tag" href="{escape(site.invite_link)}">Add to Discord</a>
<a class="tag" href="/commands">View commands</a></p>
{guilds}
"""
    return _layout(site, "Home", body, user=user)


def _command_card(cmd: Command) -> str:
    aliases = ", ".join(cmd.aliases) or "None"
    types = " ".join(f'<span class="tag">{t}</span>' for t in command_types(cmd))
    return f"""<div class="card">
<h3>{escape(cmd.name)} <span class="tag">{escape(cmd.category)}</span> {types}</h3>
<p>{escape(cmd.description)}</p>
<p class="muted">Aliases: {escape(aliases)} &middot; Permissions: {escape(format_permissions(cmd.permissions))}
&middot; Arguments: {escape(format_arguments(cmd))}</p>
</div>"""


def commands_page(
    site: SiteConfig,
    commands: list[Command],
    *,
    all_commands: list[Command],
    categories: list[str],
    search: str = "",
    category: str = "all",
    user: str | None = None,
) -> str:
    totals = catalog_totals(all_commands)
    options = "".join(
        f'<option value="{escape(c)}"{" selected" if c == category else ""}>{escape(c)}</option>'
        for c in ["all", *categories]
    )
    cards = "\n".join(_command_card(c) for c in commands) or '<p class="muted">No commands found.</p>'
    body = f"""
<h1>Commands</h1>
<p class="muted">{totals["total"]} commands &middot; {totals["prefix"]} prefix &middot; {totals["slash"]} slash</p>
<form method="get" action="/commands">
<input name="q" value="{escape(search)}" placeholder="Search commands">
<select name="category">{options}</select>
<button type="submit">Search</button>
</form>
{cards}
"""
    return _layout(site, "Commands", body, user=user)


def status_page(site: SiteConfig, *, user: str | None = None) -> str:
    body = f"""
<h1>Bot Status</h1>
<p class="muted">Real-time statistics and bot health information</p>
<div id="stats" class="grid"><p class="muted">Loading...</p></div>
<script>
async function fetchStats() {{
  const el = document.getElementById("stats");
  try {{
    const res = await fetch("/api/stats");
    const s = await res.json();
    if (!res.ok) throw new Error(s.error);
    const cards = [["Servers", s.servers.toLocaleString()], ["Users", s.users.toLocaleString()],
                   ["Uptime", s.uptime], ["Status", s.status]];
    if (s.latency) cards.push(["Latency", s.latency]);
    el.innerHTML = "";
    for (const [label, value] of cards) {{
      const card = document.createElement("div");
      card.className = "card";
      card.innerHTML = "<div class='muted'></div><h2></h2>";
      card.firstChild.textContent = label;
      card.lastChild.textContent = value;
      el.appendChild(card);
    }}
  }} catch (e) {{
    el.textContent = "Unable to reach the bot right now.";
  }}
}}
fetchStats();
setInterval(fetchStats, {STATS_POLL_SECONDS * 1000});
</script>
"""
    return _layout(site, "Status", body, user=user)


def faq_page(site: SiteConfig, *, user: str | None = None) -> str:
    items = "\n".join(
        f'<details class="card"><summary>{escape(q)}</summary><p>{escape(a)}</p></details>'
        for q, a in FAQ
    )
    body = f"""
<h1>Frequently Asked Questions</h1>
<p class="muted">Find answers to common questions about {escape(site.bot_name)}</p>
{items}
<p>Still have questions? <a href="/discord">Join our support server!</a></p>
"""
    return _layout(site, "FAQ", body, user=user)


def _input(name: str, value: str, label: str) -> str:
    return f'<label>{label}<br><input name="{name}" value="{escape(value)}" size="40"></label><br>'


def _textarea(name: str, value: str, label: str) -> str:
    return f'<label>{label}<br><textarea name="{name}" rows="3">{escape(value)}</textarea></label><br>'


def _button_row(index: int, label: str, style: str, url: str, emoji: str, row: int, disabled: bool) -> str:
    styles = "".join(
        f'<option{" selected" if s == style else ""}>{s}</option>' for s in BUTTON_STYLES
    )
    prefix = f"button-{index}"
    return f"""<div class="card">
<input name="{prefix}-label" value="{escape(label)}" placeholder="Label">
<select name="{prefix}-style">{styles}</select>
<input name="{prefix}-url" value="{escape(url)}" placeholder="URL (link only)">
<input name="{prefix}-emoji" value="{escape(emoji)}" placeholder="Emoji" size="6">
<input name="{prefix}-row" type="number" min="0" max="4" value="{row}">
<label><input name="{prefix}-disabled" type="checkbox"{" checked" if disabled else ""}> disabled</label>
</div>"""


def _preview(site: SiteConfig, d: EmbedDescription) -> str:
    parts = []
    if d.author_name:
        parts.append(f"<div><b>{escape(d.author_name)}</b></div>")
    if d.title:
        parts.append(f"<h3>{escape(d.title)}</h3>")
    if d.description:
        parts.append(f"<pre>{escape(d.description)}</pre>")
    if d.image_url:
        parts.append(f'<img src="{escape(d.image_url)}" alt="" style="max-width:100%">')
    if d.footer_text or d.timestamp:
        footer = escape(d.footer_text)
        if d.timestamp:
            footer += " &middot; <span class='muted'>now</span>"
        parts.append(f'<div class="muted">{footer}</div>')
    buttons = " ".join(
        f'<span class="tag">{escape(b.emoji)} {escape(b.label)}</span>' for b in d.buttons if b.label
    )
    return f"""<div class="card">
<div><b>{escape(site.bot_name)}</b> <span class="tag">BOT</span></div>
<pre>{escape(d.content)}</pre>
<div class="embed" style="border-color:{escape(d.color)}">{"".join(parts)}</div>
<p>{buttons}</p>
</div>"""


def embed_builder_page(
    site: SiteConfig,
    description: EmbedDescription,
    script: str,
    *,
    notice: str = "",
    user: str | None = None,
) -> str:
    d = description
    rows = [
        _button_row(i, b.label, b.style, b.url, b.emoji, b.row, b.disabled)
        for i, b in enumerate(d.buttons)
    ]
    if len(d.buttons) < MAX_BUTTONS:
        rows.append(_button_row(len(d.buttons), "", "secondary", "", "", 0, False))
    notice_html = f'<p class="tag">{escape(notice)}</p>' if notice else ""
    body = f"""
<h1>Embed Builder</h1>
{notice_html}
<div class="grid" style="grid-template-columns: 1fr 1fr">
<section>
<h2>Preview</h2>
{_preview(site, d)}
<h2>Script</h2>
<pre id="script">{escape(script)}</pre>
<form method="post" action="/embed-builder">
<input type="hidden" name="action" value="import">
{_textarea("script", "", "Import script")}
<button type="submit">Import</button>
</form>
</section>
<section>
<form method="post" action="/embed-builder">
<input type="hidden" name="action" value="build">
{_textarea("content", d.content, "Message content")}
{_input("color", d.color, "Color")}
{_input("title", d.title, "Title")}
{_textarea("description", d.description, "Description")}
{_input("author_name", d.author_name, "Author name")}
{_input("author_icon", d.author_icon, "Author icon URL")}
{_input("thumbnail_url", d.thumbnail_url, "Thumbnail URL")}
{_input("image_url", d.image_url, "Image URL")}
{_input("footer_text", d.footer_text, "Footer text")}
{_input("footer_icon", d.footer_icon, "Footer icon URL")}
<label><input type="checkbox" name="timestamp"{" checked" if d.timestamp else ""}> Timestamp</label>
<h3>Buttons ({len(d.buttons)}/{MAX_BUTTONS})</h3>
{"".join(rows)}
<button type="submit">Update</button>
</form>
</section>
</div>
"""
    return _layout(site, "Embed Builder", body, user=user)


def _css_color(value: Any) -> str:
    """Discord sends embed colors as ints."""
    try:
        return f"#{int(value or 0):06x}"
    except (TypeError, ValueError):
        return "#2f3136"


def _message_html(message: dict[str, Any]) -> str:
    author = message.get("author") or {}
    name = str(author.get("username") or "unknown")
    bot = ' <span class="tag">BOT</span>' if author.get("bot") else ""
    attachments = "".join(
        f'<div><a href="{escape(str(a.get("url", "")))}">{escape(str(a.get("filename", "file")))}</a></div>'
        for a in message.get("attachments") or []
    )
    embeds = "".join(
        f'<div class="embed" style="border-color:{_css_color(e.get("color"))}">'
        f'<b>{escape(str(e.get("title") or ""))}</b><pre>{escape(str(e.get("description") or ""))}</pre></div>'
        for e in message.get("embeds") or []
    )
    return f"""<div class="card">
<div><b>{escape(name)}</b>{bot} <span class="muted">{escape(str(message.get("timestamp", "")))}</span></div>
<pre>{escape(str(message.get("content") or ""))}</pre>
{attachments}{embeds}
</div>"""


def transcript_page(site: SiteConfig, transcript: Transcript, *, user: str | None = None) -> str:
    meta: dict[str, Any] = dict(transcript["metadata"])
    creator = (meta.get("creator") or {}).get("username", "")
    body = f"""
<h1>Ticket #{escape(str(meta.get("ticket_id", "")))}</h1>
<p class="muted">{escape(str(meta.get("guild_name") or meta.get("guild_id", "")))} &middot;
#{escape(str(meta.get("channel_name", "")))} &middot; opened by {escape(str(creator))} &middot;
{meta.get("message_count", 0)} messages &middot; closed {escape(str(meta.get("closed_at", "")))}</p>
{"".join(_message_html(m) for m in transcript["messages"])}
"""
    return _layout(site, f"Transcript {transcript['id']}", body, user=user)


def error_page(site: SiteConfig, title: str, message: str, *, user: str | None = None) -> str:
    body = f"<h1>{escape(title)}</h1><p class='muted'>{escape(message)}</p>"
    return _layout(site, title, body, user=user)
