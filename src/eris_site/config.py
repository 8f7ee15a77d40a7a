"""User-configurable values loaded from environment variables."""

import os
import sys
from dataclasses import asdict, dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

_REQUIRED = ("DISCORD_CLIENT_ID", "DISCORD_CLIENT_SECRET")
_missing = [var for var in _REQUIRED if not os.environ.get(var)]
if _missing:
    print(f"Missing required env vars: {', '.join(_missing)}", file=sys.stderr)
    print("Set them in .env or your environment.", file=sys.stderr)
    raise SystemExit(1)

DISCORD_CLIENT_ID: str = os.environ["DISCORD_CLIENT_ID"]
DISCORD_CLIENT_SECRET: str = os.environ["DISCORD_CLIENT_SECRET"]

BASE_URL: str = (os.environ.get("ERIS_BASE_URL") or "http://localhost:5000").rstrip("/")
STATS_URL: str = os.environ.get("ERIS_STATS_URL") or f"{BASE_URL}/api/bot-stats"
REDIRECT_URI: str = os.environ.get("ERIS_REDIRECT_URI") or f"{BASE_URL}/oauth/callback"
TRANSCRIPT_SECRET: str | None = os.environ.get("ERIS_TRANSCRIPT_SECRET") or None
COMMANDS_FILE: str | None = os.environ.get("ERIS_COMMANDS_FILE") or None

HOST: str = os.environ.get("ERIS_HOST") or "127.0.0.1"
PORT: int = int(os.environ.get("ERIS_PORT") or "5000")
LOG_LEVEL: str = (os.environ.get("ERIS_LOG_LEVEL") or "INFO").upper()

DATA_DIR: Path = Path(os.environ.get("ERIS_DATA_DIR") or Path.home() / ".eris-site")


@dataclass(frozen=True, slots=True)
class SiteConfig:
    """Public branding values; served as /siteconfig.json."""

    bot_name: str
    bot_logo: str
    favicon: str
    tagline: str
    invite_link: str
    support_server: str

    def to_json(self) -> dict[str, str]:
        # camelCase keys match what the bot's other tooling reads
        data = asdict(self)
        return {
            "botName": data["bot_name"],
            "botLogo": data["bot_logo"],
            "favicon": data["favicon"],
            "tagline": data["tagline"],
            "inviteLink": data["invite_link"],
            "supportServer": data["support_server"],
        }


def load_site_config() -> SiteConfig:
    return SiteConfig(
        bot_name=os.environ.get("ERIS_BOT_NAME") or "Eris Bot",
        bot_logo=os.environ.get("ERIS_BOT_LOGO") or "/static/eris-logo.png",
        favicon=os.environ.get("ERIS_FAVICON") or "/static/favicon.png",
        tagline=os.environ.get("ERIS_TAGLINE") or "Systematically does it all",
        invite_link=os.environ.get("ERIS_INVITE_LINK")
        or f"https://discord.com/oauth2/authorize?client_id={DISCORD_CLIENT_ID}",
        support_server=os.environ.get("ERIS_SUPPORT_SERVER") or "https://discord.gg/w5qKuKnGVp",
    )
