"""Tests for config module."""

import importlib

import dotenv
import pytest

import eris_site.config as config_mod


@pytest.fixture(autouse=True)
def _restore_config():
    yield
    importlib.reload(config_mod)


def test_missing_client_id_exits(monkeypatch):
    monkeypatch.delenv("DISCORD_CLIENT_ID", raising=False)
    monkeypatch.setenv("DISCORD_CLIENT_SECRET", "secret")
    monkeypatch.setattr(dotenv, "load_dotenv", lambda: None)

    with pytest.raises(SystemExit):
        importlib.reload(config_mod)


def test_missing_client_secret_exits(monkeypatch):
    monkeypatch.setenv("DISCORD_CLIENT_ID", "123")
    monkeypatch.delenv("DISCORD_CLIENT_SECRET", raising=False)
    monkeypatch.setattr(dotenv, "load_dotenv", lambda: None)

    with pytest.raises(SystemExit):
        importlib.reload(config_mod)


def test_valid_config_loads(monkeypatch):
    monkeypatch.setenv("DISCORD_CLIENT_ID", "555")
    monkeypatch.setenv("DISCORD_CLIENT_SECRET", "shh")
    monkeypatch.setenv("ERIS_BASE_URL", "https://eris.example/")
    monkeypatch.delenv("ERIS_STATS_URL", raising=False)
    monkeypatch.delenv("ERIS_REDIRECT_URI", raising=False)

    importlib.reload(config_mod)
    assert config_mod.DISCORD_CLIENT_ID == "555"
    assert config_mod.BASE_URL == "https://eris.example"
    assert config_mod.STATS_URL == "https://eris.example/api/bot-stats"
    assert config_mod.REDIRECT_URI == "https://eris.example/oauth/callback"


def test_site_config_defaults(monkeypatch):
    monkeypatch.delenv("ERIS_BOT_NAME", raising=False)
    monkeypatch.delenv("ERIS_INVITE_LINK", raising=False)

    site = config_mod.load_site_config()

    assert site.bot_name == "Eris Bot"
    assert site.invite_link.endswith(f"client_id={config_mod.DISCORD_CLIENT_ID}")


def test_site_config_json_keys(monkeypatch):
    monkeypatch.setenv("ERIS_BOT_NAME", "Custom")

    data = config_mod.load_site_config().to_json()

    assert data["botName"] == "Custom"
    assert set(data) == {"botName", "botLogo", "favicon", "tagline", "inviteLink", "supportServer"}
