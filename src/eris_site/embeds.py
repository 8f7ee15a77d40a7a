"""Render builder descriptions as discord.py embeds/views for the live preview."""

import logging
from datetime import datetime, timezone
from typing import Any

import discord
from discord.ui import Button, View

from eris_site.embed_types import (
    DEFAULT_COLOR,
    MAX_BUTTONS,
    ButtonDescription,
    ButtonStyle,
    EmbedDescription,
)

log = logging.getLogger(__name__)

STYLE_MAP: dict[ButtonStyle, discord.ButtonStyle] = {
    "primary": discord.ButtonStyle.primary,
    "secondary": discord.ButtonStyle.secondary,
    "success": discord.ButtonStyle.success,
    "danger": discord.ButtonStyle.danger,
    "link": discord.ButtonStyle.link,
}


def parse_color(value: str) -> discord.Color:
    """Invalid hex falls back to the builder's default gray."""
    try:
        return discord.Color.from_str(value.strip())
    except ValueError:
        return discord.Color.from_str(DEFAULT_COLOR)


def build_embed(description: EmbedDescription) -> discord.Embed:
    d = description
    embed = discord.Embed(
        title=d.title or None,
        description=d.description or None,
        color=parse_color(d.color),
        timestamp=datetime.now(timezone.utc) if d.timestamp else None,
    )
    if d.author_name:
        embed.set_author(name=d.author_name, icon_url=d.author_icon or None)
    if d.thumbnail_url:
        embed.set_thumbnail(url=d.thumbnail_url)
    if d.image_url:
        embed.set_image(url=d.image_url)
    if d.footer_text:
        embed.set_footer(text=d.footer_text, icon_url=d.footer_icon or None)
    return embed


def _build_button(index: int, btn: ButtonDescription) -> Button:
    if btn.style == "link":
        return Button(
            label=btn.label,
            url=btn.url,
            emoji=btn.emoji or None,
            row=btn.row,
            disabled=btn.disabled,
        )
    return Button(
        label=btn.label,
        style=STYLE_MAP[btn.style],
        custom_id=f"preview:{index}",
        emoji=btn.emoji or None,
        row=btn.row,
        disabled=btn.disabled,
    )


def build_view(buttons: tuple[ButtonDescription, ...]) -> View | None:
    """Returns None when empty; caps at 25 buttons (Discord limit).

    Must be called with a running event loop (View creates a future).
    Buttons that cannot be placed -- unlabeled, link without url, full row --
    are left out of the preview.
    """
    if not buttons:
        return None
    view = View(timeout=None)
    for index, btn in enumerate(buttons[:MAX_BUTTONS]):
        if not btn.label or (btn.style == "link" and not btn.url):
            continue
        try:
            view.add_item(_build_button(index, btn))
        except ValueError:
            log.warning("Row %d full, preview skips button %r", btn.row, btn.label)
    return view


def message_payload(description: EmbedDescription) -> dict[str, Any]:
    """Discord message JSON for the description: content, one embed, components."""
    payload: dict[str, Any] = {
        "content": description.content,
        "embeds": [build_embed(description).to_dict()],
        "components": [],
    }
    view = build_view(description.buttons)
    if view is not None:
        payload["components"] = view.to_components()
    return payload
