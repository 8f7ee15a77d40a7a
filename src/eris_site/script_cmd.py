"""CLI handler for `eris-site script` subcommand."""

import argparse
import json
import sys

from eris_site.embed_types import description_from_dict, description_to_dict
from eris_site.script import decode_script, encode_script, inspect_script


def _read_source(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, encoding="utf-8") as f:
        return f.read()


def run_script_command(argv: list[str]) -> None:
    parser = argparse.ArgumentParser(prog="eris-site script")
    sub = parser.add_subparsers(dest="action")

    enc_p = sub.add_parser("encode", help="JSON description -> script")
    enc_p.add_argument("file", help="JSON file, or - for stdin")

    dec_p = sub.add_parser("decode", help="Script -> JSON description")
    dec_p.add_argument("file", help="Script file, or - for stdin")

    chk_p = sub.add_parser("check", help="Report missing segments and dropped buttons")
    chk_p.add_argument("file", help="Script file, or - for stdin")

    args = parser.parse_args(argv)

    if args.action == "encode":
        _handle_encode(args.file)
    elif args.action == "decode":
        _handle_decode(args.file)
    elif args.action == "check":
        _handle_check(args.file)
    else:
        parser.print_help()
        sys.exit(1)


def _handle_encode(path: str) -> None:
    try:
        data = json.loads(_read_source(path))
        description = description_from_dict(data)
    except (json.JSONDecodeError, ValueError, AttributeError) as exc:
        print(f"error: invalid description: {exc}")
        sys.exit(1)
    print(encode_script(description))


def _handle_decode(path: str) -> None:
    description = decode_script(_read_source(path).strip())
    print(json.dumps(description_to_dict(description), indent=2, ensure_ascii=False))


def _handle_check(path: str) -> None:
    report = inspect_script(_read_source(path).strip())
    if not report.has_embed:
        print("warning: no $v{embed} marker")
    if report.missing:
        print(f"missing: {', '.join(report.missing)}")
    else:
        print("missing: none")
    print(f"buttons: {len(report.description.buttons)} kept, {report.dropped_buttons} dropped")
