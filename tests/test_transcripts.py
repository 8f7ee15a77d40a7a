"""Tests for transcripts.py — ticket transcript storage."""

import re

from eris_site.transcripts import (
    create_transcript,
    delete_transcript,
    generate_transcript_id,
    get_transcript,
    is_valid_id,
    list_transcripts,
    store_transcript,
    validate_create_request,
)


def _payload(**overrides):
    data = {
        "ticket_id": "42",
        "messages": [
            {
                "id": "1",
                "author": {"id": "10", "username": "alice", "avatar_url": ""},
                "content": "hello",
                "timestamp": "2024-01-01T00:00:00Z",
            },
            {
                "id": "2",
                "author": {"id": "11", "username": "staff", "avatar_url": ""},
                "content": "hi, how can we help?",
                "timestamp": "2024-01-01T00:01:00Z",
            },
        ],
        "metadata": {"ticket_id": "42", "channel_name": "ticket-42", "guild_id": "1"},
    }
    data.update(overrides)
    return data


def test_generate_id_format():
    tid = generate_transcript_id()

    assert re.fullmatch(r"[0-9a-z]+-[0-9a-z]{7}", tid)
    assert is_valid_id(tid)


def test_generated_ids_unique():
    assert len({generate_transcript_id() for _ in range(200)}) == 200


def test_is_valid_id_rejects_traversal():
    assert not is_valid_id("../secrets")
    assert not is_valid_id("a/b")
    assert not is_valid_id("")
    assert not is_valid_id("ABC")


def test_create_and_get(data_dir):
    transcript = create_transcript(_payload())

    loaded = get_transcript(transcript["id"])

    assert loaded == transcript
    assert loaded["metadata"]["message_count"] == 2
    assert loaded["metadata"]["channel_name"] == "ticket-42"
    assert loaded["created_at"].endswith("+00:00")
    assert (data_dir / "transcripts" / f"{transcript['id']}.json").exists()


def test_create_leaves_no_temp_files(data_dir):
    create_transcript(_payload())

    assert list((data_dir / "transcripts").glob("*.tmp")) == []


def test_get_unknown_returns_none(data_dir):
    assert get_transcript("does-not-exist") is None


def test_get_invalid_id_returns_none(data_dir):
    assert get_transcript("../../etc/passwd") is None


def test_get_corrupt_returns_none(data_dir):
    (data_dir / "transcripts").mkdir()
    (data_dir / "transcripts" / "broken.json").write_text("{not json")

    assert get_transcript("broken") is None


def test_list_and_delete(data_dir):
    first = create_transcript(_payload(ticket_id="1"))
    second = create_transcript(_payload(ticket_id="2"))

    ids = {t["id"] for t in list_transcripts()}
    assert ids == {first["id"], second["id"]}

    assert delete_transcript(first["id"]) is True
    assert delete_transcript(first["id"]) is False
    assert [t["id"] for t in list_transcripts()] == [second["id"]]


def test_list_empty(data_dir):
    assert list_transcripts() == []


def test_store_overwrites(data_dir):
    transcript = create_transcript(_payload())
    transcript["messages"] = []

    store_transcript(transcript["id"], transcript)

    assert get_transcript(transcript["id"])["messages"] == []


def test_validate_valid():
    assert validate_create_request(_payload()) == []


def test_validate_missing_fields():
    errors = validate_create_request({"ticket_id": "1"})

    assert any("messages" in e for e in errors)
    assert any("metadata" in e for e in errors)


def test_validate_wrong_types():
    errors = validate_create_request(_payload(messages="nope", metadata=[]))

    assert len(errors) == 2


def test_validate_non_object():
    assert validate_create_request(["not", "an", "object"])
