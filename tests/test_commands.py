"""Tests for commands.py — command catalog loading and search."""

from eris_site.commands import (
    Command,
    CommandArg,
    catalog_totals,
    categories,
    command_to_json,
    command_types,
    filter_commands,
    format_arguments,
    format_permissions,
    load_commands,
)


def test_load_default_catalog():
    commands = load_commands()

    names = {c.name for c in commands}
    assert {"ban", "purge", "ping", "help"} <= names
    ban = next(c for c in commands if c.name == "ban")
    assert ban.category == "moderation"
    assert ban.required_args[0] == CommandArg("member", "member")


def test_load_missing_file(tmp_path):
    assert load_commands(tmp_path / "nope.yaml") == []


def test_load_not_a_list(tmp_path):
    path = tmp_path / "commands.yaml"
    path.write_text("name: ban\n")

    assert load_commands(path) == []


def test_load_skips_corrupt_entries(tmp_path):
    path = tmp_path / "commands.yaml"
    path.write_text(
        "- name: ok\n"
        "  description: fine\n"
        "- description: no name here\n"
        "- just a string\n"
    )

    commands = load_commands(path)

    assert [c.name for c in commands] == ["ok"]
    assert commands[0].category == "misc"
    assert commands[0].has_prefix is True
    assert commands[0].has_slash is False


def test_categories(commands):
    assert categories(commands) == ["moderation", "utility"]


def test_filter_all_sorted(commands):
    result = filter_commands(commands)

    assert [c.name for c in result] == ["ban", "purge", "ping"]


def test_filter_by_category(commands):
    assert [c.name for c in filter_commands(commands, category="utility")] == ["ping"]


def test_filter_search_matches_alias_and_description(commands):
    assert [c.name for c in filter_commands(commands, search="CLEAR")] == ["purge"]
    assert [c.name for c in filter_commands(commands, search="latency")] == ["ping"]


def test_filter_search_and_category_combined(commands):
    assert filter_commands(commands, search="ban", category="utility") == []


def test_format_permissions():
    assert format_permissions(("manage_messages", "ban_members")) == "Manage Messages, Ban Members"
    assert format_permissions(()) == "None"


def test_format_arguments(commands):
    ban, purge, _ = commands

    assert format_arguments(ban) == "1 required, 1 optional"
    assert format_arguments(purge) == "None"


def test_command_types():
    assert command_types(Command("x", "", "misc", has_slash=True)) == ["Prefix", "Slash"]
    assert command_types(Command("x", "", "misc", has_prefix=False, has_slash=True)) == ["Slash"]


def test_catalog_totals(commands):
    assert catalog_totals(commands) == {"total": 3, "prefix": 3, "slash": 2}


def test_command_to_json(commands):
    data = command_to_json(commands[0])

    assert data["name"] == "ban"
    assert data["aliases"] == ["b"]
    assert data["types"] == ["Prefix", "Slash"]
    assert data["permissions"] == "Ban Members"
    assert data["required_args"] == [{"name": "member", "type": "member"}]
