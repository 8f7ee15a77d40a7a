"""Embed script codec: EmbedDescription <-> the bot's ``$v{...}`` script text.

A script is a run of self-delimiting segments with no separator between them::

    {content: hi}$v{embed}$v{color: #ff0000}$v{title: Hi}$v{buttons}$v{button: label=Go && style=link && url=https://x.com && row=1}

Author and footer segments use ``key: value`` sub-fields while button segments
use ``key=value``. Both grammars are kept as-is so scripts already pasted into
the bot keep working.

Only newlines are escaped (as the two characters ``\\n``). A literal ``}`` or
``&&`` inside user text does not survive a round trip.
"""

import re
from dataclasses import dataclass, field

from eris_site.embed_types import (
    BUTTON_STYLES,
    DEFAULT_COLOR,
    DEFAULT_STYLE,
    MAX_BUTTONS,
    ButtonDescription,
    EmbedDescription,
    clamp_row,
)

EMBED_MARKER = "$v{embed}"
TIMESTAMP_MARKER = "$v{timestamp}"
BUTTONS_MARKER = "$v{buttons}"
SUBFIELD_SEP = " && "

_NEWLINE_TOKEN = "\\n"

_CONTENT_RE = re.compile(r"\{content:\s*([^}]*)\}")
_COLOR_RE = re.compile(r"\{color:\s*([^}]*)\}")
_TITLE_RE = re.compile(r"\{title:\s*([^}]*)\}")
_DESCRIPTION_RE = re.compile(r"\{description:\s*([^}]*)\}")
_AUTHOR_RE = re.compile(r"\{author:\s*name:\s*([^}]*?)\s*&&\s*icon:\s*([^}]*)\}")
_THUMBNAIL_RE = re.compile(r"\{thumbnail:\s*([^}]*)\}")
_IMAGE_RE = re.compile(r"\{image:\s*([^}]*)\}")
_FOOTER_RE = re.compile(r"\{footer:\s*text:\s*([^}]*?)\s*&&\s*icon:\s*([^}]*)\}")
_BUTTON_RE = re.compile(r"\{button:\s*([^}]*)\}")


def _escape(text: str) -> str:
    return text.replace("\n", _NEWLINE_TOKEN)


def _unescape(text: str) -> str:
    return text.replace(_NEWLINE_TOKEN, "\n")


# --- Encode ---


def _button_segment(button: ButtonDescription) -> str:
    parts = [f"label={_escape(button.label)}", f"style={button.style}"]
    if button.url:
        parts.append(f"url={button.url}")
    if button.emoji:
        parts.append(f"emoji={button.emoji}")
    parts.append(f"row={button.row}")
    if button.disabled:
        parts.append("disabled=true")
    return f"$v{{button: {SUBFIELD_SEP.join(parts)}}}"


def encode_script(description: EmbedDescription) -> str:
    """Serialize builder state; always contains at least the embed marker."""
    d = description
    parts: list[str] = []
    if d.content:
        parts.append(f"{{content: {_escape(d.content)}}}")
    parts.append(EMBED_MARKER)
    if d.color:
        parts.append(f"$v{{color: {d.color}}}")
    if d.title:
        parts.append(f"$v{{title: {_escape(d.title)}}}")
    if d.description:
        parts.append(f"$v{{description: {_escape(d.description)}}}")
    if d.timestamp:
        parts.append(TIMESTAMP_MARKER)
    if d.author_name:
        parts.append(
            f"$v{{author: name: {_escape(d.author_name)}"
            f"{SUBFIELD_SEP}icon: {d.author_icon or ''}}}"
        )
    if d.thumbnail_url:
        parts.append(f"$v{{thumbnail: {d.thumbnail_url}}}")
    if d.image_url:
        parts.append(f"$v{{image: {d.image_url}}}")
    if d.footer_text:
        parts.append(
            f"$v{{footer: text: {_escape(d.footer_text)}"
            f"{SUBFIELD_SEP}icon: {d.footer_icon or ''}}}"
        )
    if d.buttons:
        parts.append(BUTTONS_MARKER)
        parts.extend(_button_segment(b) for b in d.buttons if b.label)
    return "".join(parts)


# --- Decode ---


def _parse_row(value: str) -> int:
    try:
        return clamp_row(int(value))
    except ValueError:
        return 0


def _parse_button(body: str) -> ButtonDescription:
    fields: dict[str, str] = {}
    for prop in body.split("&&"):
        key, _, value = prop.partition("=")
        fields[key.strip()] = value.strip()
    style = fields.get("style") or DEFAULT_STYLE
    return ButtonDescription(
        label=_unescape(fields.get("label", "")),
        style=style if style in BUTTON_STYLES else DEFAULT_STYLE,  # type: ignore[arg-type]
        url=fields.get("url", ""),
        emoji=fields.get("emoji", ""),
        row=_parse_row(fields.get("row", "0")),
        disabled=fields.get("disabled") == "true",
    )


def _scan_buttons(script: str) -> tuple[list[ButtonDescription], int]:
    """Returns (kept buttons, number of segments dropped)."""
    if "{buttons}" not in script:
        return [], 0
    kept: list[ButtonDescription] = []
    dropped = 0
    for match in _BUTTON_RE.finditer(script):
        button = _parse_button(match.group(1))
        if not button.label or len(kept) >= MAX_BUTTONS:
            dropped += 1
            continue
        kept.append(button)
    return kept, dropped


def _text(pattern: re.Pattern[str], script: str, default: str = "") -> str:
    match = pattern.search(script)
    return _unescape(match.group(1).strip()) if match else default


def _plain(pattern: re.Pattern[str], script: str, default: str = "") -> str:
    """Like _text but for URLs and colors, which are never escaped."""
    match = pattern.search(script)
    return match.group(1).strip() if match else default


def _pair(pattern: re.Pattern[str], script: str) -> tuple[str, str]:
    match = pattern.search(script)
    if not match:
        return "", ""
    return _unescape(match.group(1).strip()), match.group(2).strip()


def decode_script(script: str) -> EmbedDescription:
    """Permissive: every missing or malformed segment falls back to its default."""
    return inspect_script(script).description


@dataclass(frozen=True, slots=True)
class ScriptReport:
    """Decoded description plus what the decoder had to fill in or discard."""

    description: EmbedDescription
    missing: tuple[str, ...] = field(default_factory=tuple)
    dropped_buttons: int = 0
    has_embed: bool = False


_SEGMENT_PATTERNS: dict[str, re.Pattern[str]] = {
    "content": _CONTENT_RE,
    "color": _COLOR_RE,
    "title": _TITLE_RE,
    "description": _DESCRIPTION_RE,
    "author": _AUTHOR_RE,
    "thumbnail": _THUMBNAIL_RE,
    "image": _IMAGE_RE,
    "footer": _FOOTER_RE,
}


def inspect_script(script: str) -> ScriptReport:
    author_name, author_icon = _pair(_AUTHOR_RE, script)
    footer_text, footer_icon = _pair(_FOOTER_RE, script)
    buttons, dropped = _scan_buttons(script)

    description = EmbedDescription(
        content=_text(_CONTENT_RE, script),
        color=_plain(_COLOR_RE, script, DEFAULT_COLOR),
        title=_text(_TITLE_RE, script),
        description=_text(_DESCRIPTION_RE, script),
        author_name=author_name,
        author_icon=author_icon,
        thumbnail_url=_plain(_THUMBNAIL_RE, script),
        image_url=_plain(_IMAGE_RE, script),
        footer_text=footer_text,
        footer_icon=footer_icon,
        timestamp="{timestamp}" in script,
        buttons=tuple(buttons),
    )

    missing = [name for name, pattern in _SEGMENT_PATTERNS.items() if not pattern.search(script)]
    if "{timestamp}" not in script:
        missing.append("timestamp")
    if "{buttons}" not in script:
        missing.append("buttons")

    return ScriptReport(
        description=description,
        missing=tuple(missing),
        dropped_buttons=dropped,
        has_embed="{embed}" in script,
    )
