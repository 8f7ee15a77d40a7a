"""CLI handler for `eris-site transcript` subcommand."""

import argparse
import json
import sys

from eris_site.transcripts import Transcript, delete_transcript, get_transcript, list_transcripts


def _summary(t: Transcript) -> str:
    meta = t["metadata"]
    channel = meta.get("channel_name", "?")
    return f"ticket {meta.get('ticket_id', '?')} #{channel} ({meta.get('message_count', 0)} msgs)"


def run_transcript_command(argv: list[str]) -> None:
    parser = argparse.ArgumentParser(prog="eris-site transcript")
    sub = parser.add_subparsers(dest="action")

    sub.add_parser("list", help="List stored transcripts")

    show_p = sub.add_parser("show", help="Print a transcript as JSON")
    show_p.add_argument("id", help="Transcript ID")

    del_p = sub.add_parser("delete", help="Delete a transcript by ID")
    del_p.add_argument("id", help="Transcript ID")

    args = parser.parse_args(argv)

    if args.action == "list":
        _handle_list()
    elif args.action == "show":
        _handle_show(args.id)
    elif args.action == "delete":
        _handle_delete(args.id)
    else:
        parser.print_help()
        sys.exit(1)


def _handle_list() -> None:
    transcripts = list_transcripts()
    if not transcripts:
        print("no transcripts")
        return
    for t in transcripts:
        print(f"  {t['id']}  {t['created_at'][:19]}  {_summary(t)}")


def _handle_show(transcript_id: str) -> None:
    transcript = get_transcript(transcript_id)
    if transcript is None:
        print(f"transcript {transcript_id} not found")
        sys.exit(1)
    print(json.dumps(transcript, indent=2, ensure_ascii=False))


def _handle_delete(transcript_id: str) -> None:
    if delete_transcript(transcript_id):
        print(f"deleted {transcript_id}")
    else:
        print(f"transcript {transcript_id} not found")
        sys.exit(1)
