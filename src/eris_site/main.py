"""Entry point for eris-site."""

from __future__ import annotations

import asyncio
import logging
import signal
import sys

HELP = """\
eris-site -- companion website for the Eris Discord bot

commands:
  eris-site                      Run the web server
  eris-site script encode FILE   Encode a JSON embed description to a script
  eris-site script decode FILE   Decode a script to a JSON embed description
  eris-site script check FILE    Report which segments a script is missing
  eris-site transcript list      List stored transcripts
  eris-site transcript show ID   Print a stored transcript as JSON
  eris-site transcript delete ID Delete a stored transcript
  eris-site help                 Show this help message

FILE may be - to read from stdin.

examples:
  echo '{"title": "Hi", "color": "#ff0000"}' | eris-site script encode -
  eris-site transcript show lq2x9k1-a8f3k2d
"""


def _dispatch_subcommand() -> bool:
    """Route CLI subcommands. Returns True if handled."""
    if len(sys.argv) < 2:
        return False
    cmd = sys.argv[1]
    rest = sys.argv[2:]
    if cmd in ("help", "--help", "-h"):
        print(HELP)
        return True
    routes: dict[str, tuple[str, str]] = {
        "script": ("eris_site.script_cmd", "run_script_command"),
        "transcript": ("eris_site.transcript_cmd", "run_transcript_command"),
    }
    if cmd in routes:
        from importlib import import_module

        mod_path, func_name = routes[cmd]
        getattr(import_module(mod_path), func_name)(rest)
        return True
    print(f"unknown command: {cmd}\n")
    print(HELP)
    raise SystemExit(1)


log = logging.getLogger(__name__)


async def _run(host: str, port: int) -> None:
    """Serve until SIGTERM/SIGINT."""
    from eris_site import web

    loop = asyncio.get_running_loop()
    stopped = asyncio.Event()
    loop.add_signal_handler(signal.SIGTERM, stopped.set)
    loop.add_signal_handler(signal.SIGINT, stopped.set)

    await web.start(host, port)
    try:
        await stopped.wait()
    finally:
        await web.stop()


def main() -> None:
    if _dispatch_subcommand():
        return

    from eris_site import config

    logging.basicConfig(
        level=config.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    asyncio.run(_run(config.HOST, config.PORT))


if __name__ == "__main__":
    main()
