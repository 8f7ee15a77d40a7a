"""Shared fixtures for eris-site tests."""

import os

os.environ.setdefault("DISCORD_CLIENT_ID", "123456789")
os.environ.setdefault("DISCORD_CLIENT_SECRET", "test-secret")
os.environ.pop("ERIS_TRANSCRIPT_SECRET", None)

import pytest

from eris_site.commands import Command, CommandArg
from eris_site.config import SiteConfig


@pytest.fixture()
def data_dir(tmp_path, monkeypatch):
    """Redirect all data file paths to a temp directory."""
    import eris_site.config as config_mod
    import eris_site.transcripts as transcripts_mod

    monkeypatch.setattr(config_mod, "DATA_DIR", tmp_path)
    monkeypatch.setattr(transcripts_mod, "TRANSCRIPTS_DIR", tmp_path / "transcripts")
    return tmp_path


@pytest.fixture()
def site():
    return SiteConfig(
        bot_name="Eris Bot",
        bot_logo="/static/eris-logo.png",
        favicon="/static/favicon.png",
        tagline="Systematically does it all",
        invite_link="https://discord.com/oauth2/authorize?client_id=123456789",
        support_server="https://discord.gg/example",
    )


@pytest.fixture()
def commands():
    return [
        Command(
            name="ban",
            description="Ban a member from the server",
            category="moderation",
            aliases=("b",),
            has_slash=True,
            permissions=("ban_members",),
            required_args=(CommandArg("member", "member"),),
            optional_args=(CommandArg("reason"),),
        ),
        Command(
            name="purge",
            description="Bulk delete recent messages",
            category="moderation",
            aliases=("clear",),
            permissions=("manage_messages",),
        ),
        Command(name="ping", description="Show the bot's latency", category="utility", has_slash=True),
    ]
