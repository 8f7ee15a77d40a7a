"""Command reference catalog: loading, search and display formatting."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

log = logging.getLogger(__name__)

DEFAULT_COMMANDS_FILE = Path(__file__).resolve().parent / "commands.yaml"


@dataclass(frozen=True, slots=True)
class CommandArg:
    name: str
    type: str = "text"


@dataclass(frozen=True, slots=True)
class Command:
    name: str
    description: str
    category: str
    aliases: tuple[str, ...] = field(default_factory=tuple)
    has_prefix: bool = True
    has_slash: bool = False
    permissions: tuple[str, ...] = field(default_factory=tuple)
    required_args: tuple[CommandArg, ...] = field(default_factory=tuple)
    optional_args: tuple[CommandArg, ...] = field(default_factory=tuple)

    def matches(self, term: str) -> bool:
        term = term.lower()
        return (
            term in self.name.lower()
            or term in self.description.lower()
            or any(term in alias.lower() for alias in self.aliases)
        )


def _parse_args(raw: Any) -> tuple[CommandArg, ...]:
    args = []
    for item in raw or []:
        if isinstance(item, dict) and item.get("name"):
            args.append(CommandArg(name=str(item["name"]), type=str(item.get("type") or "text")))
    return tuple(args)


def _parse_command(data: dict[str, Any]) -> Command:
    return Command(
        name=str(data["name"]),
        description=str(data.get("description") or ""),
        category=str(data.get("category") or "misc"),
        aliases=tuple(str(a) for a in data.get("aliases") or []),
        has_prefix=bool(data.get("has_prefix", True)),
        has_slash=bool(data.get("has_slash", False)),
        permissions=tuple(str(p) for p in data.get("permissions") or []),
        required_args=_parse_args(data.get("required_args")),
        optional_args=_parse_args(data.get("optional_args")),
    )


def load_commands(path: Path = DEFAULT_COMMANDS_FILE) -> list[Command]:
    """Read a YAML list of commands, skipping entries that don't parse."""
    if not path.exists():
        log.warning("Command catalog not found: %s", path)
        return []
    data = yaml.safe_load(path.read_text())
    if not isinstance(data, list):
        log.warning("Command catalog is not a list: %s", path)
        return []
    result: list[Command] = []
    for entry in data:
        try:
            result.append(_parse_command(entry))
        except (KeyError, TypeError):
            log.warning("Skipping corrupt command entry: %.80r", entry)
    return result


def categories(commands: list[Command]) -> list[str]:
    return sorted({c.category for c in commands if c.category})


def filter_commands(
    commands: list[Command], search: str = "", category: str = "all"
) -> list[Command]:
    """Sorted by category, then name."""
    result = [
        c
        for c in commands
        if (category == "all" or c.category == category) and (not search or c.matches(search))
    ]
    return sorted(result, key=lambda c: (c.category, c.name))


def format_permissions(permissions: tuple[str, ...]) -> str:
    """``manage_messages`` -> ``Manage Messages``."""
    if not permissions:
        return "None"
    return ", ".join(
        " ".join(word.capitalize() for word in p.split("_")) for p in permissions
    )


def format_arguments(command: Command) -> str:
    parts = []
    if command.required_args:
        parts.append(f"{len(command.required_args)} required")
    if command.optional_args:
        parts.append(f"{len(command.optional_args)} optional")
    return ", ".join(parts) if parts else "None"


def command_types(command: Command) -> list[str]:
    types = []
    if command.has_prefix:
        types.append("Prefix")
    if command.has_slash:
        types.append("Slash")
    return types


def catalog_totals(commands: list[Command]) -> dict[str, int]:
    return {
        "total": len(commands),
        "prefix": sum(1 for c in commands if c.has_prefix),
        "slash": sum(1 for c in commands if c.has_slash),
    }


def command_to_json(command: Command) -> dict[str, Any]:
    return {
        "name": command.name,
        "description": command.description,
        "category": command.category,
        "aliases": list(command.aliases),
        "types": command_types(command),
        "permissions": format_permissions(command.permissions),
        "arguments": format_arguments(command),
        "required_args": [{"name": a.name, "type": a.type} for a in command.required_args],
        "optional_args": [{"name": a.name, "type": a.type} for a in command.optional_args],
    }
