"""Structured embed/button descriptions shared by the builder, codec and renderer."""

import dataclasses
from dataclasses import dataclass, field
from typing import Any, Literal, get_args

ButtonStyle = Literal["primary", "secondary", "success", "danger", "link"]

BUTTON_STYLES: tuple[str, ...] = get_args(ButtonStyle)
DEFAULT_COLOR = "#2F3136"
DEFAULT_STYLE: ButtonStyle = "secondary"
MAX_BUTTONS = 25  # Discord limit: 5 rows of 5
MAX_ROW = 4


class ButtonLimitError(ValueError):
    """Raised when a description would carry more than MAX_BUTTONS buttons."""


def clamp_row(row: int) -> int:
    return max(0, min(MAX_ROW, row))


@dataclass(frozen=True, slots=True)
class ButtonDescription:
    label: str
    style: ButtonStyle = DEFAULT_STYLE
    url: str = ""
    emoji: str = ""
    row: int = 0
    disabled: bool = False

    def __post_init__(self) -> None:
        if self.row != clamp_row(self.row):
            object.__setattr__(self, "row", clamp_row(self.row))


@dataclass(frozen=True, slots=True)
class EmbedDescription:
    """Builder state. Immutable; update with ``dataclasses.replace`` or ``with_button``."""

    content: str = ""
    color: str = DEFAULT_COLOR
    title: str = ""
    description: str = ""
    author_name: str = ""
    author_icon: str = ""
    thumbnail_url: str = ""
    image_url: str = ""
    footer_text: str = ""
    footer_icon: str = ""
    timestamp: bool = False
    buttons: tuple[ButtonDescription, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if len(self.buttons) > MAX_BUTTONS:
            raise ButtonLimitError(
                f"{len(self.buttons)} buttons given, max {MAX_BUTTONS}"
            )
        if not isinstance(self.buttons, tuple):
            object.__setattr__(self, "buttons", tuple(self.buttons))

    def with_button(self, button: ButtonDescription) -> "EmbedDescription":
        if len(self.buttons) >= MAX_BUTTONS:
            raise ButtonLimitError(f"Maximum of {MAX_BUTTONS} buttons reached")
        return dataclasses.replace(self, buttons=(*self.buttons, button))

    def without_button(self, index: int) -> "EmbedDescription":
        buttons = self.buttons[:index] + self.buttons[index + 1 :]
        return dataclasses.replace(self, buttons=buttons)


def _coerce_row(value: Any) -> int:
    try:
        return clamp_row(int(value))
    except (TypeError, ValueError):
        return 0


def _coerce_flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() == "true"
    return value is True


def button_from_dict(data: dict[str, Any]) -> ButtonDescription:
    """Lenient: unknown styles fall back to secondary, bad rows to 0."""
    style = str(data.get("style") or DEFAULT_STYLE)
    return ButtonDescription(
        label=str(data.get("label") or ""),
        style=style if style in BUTTON_STYLES else DEFAULT_STYLE,  # type: ignore[arg-type]
        url=str(data.get("url") or ""),
        emoji=str(data.get("emoji") or ""),
        row=_coerce_row(data.get("row", 0)),
        disabled=_coerce_flag(data.get("disabled")),
    )


def description_from_dict(data: dict[str, Any]) -> EmbedDescription:
    """Build a description from JSON; extra keys are ignored."""
    raw_buttons = data.get("buttons") or []
    if not isinstance(raw_buttons, list):
        raise ValueError("buttons must be a list")
    buttons = tuple(button_from_dict(b) for b in raw_buttons if isinstance(b, dict))
    text_fields = {
        f.name
        for f in dataclasses.fields(EmbedDescription)
        if f.name not in ("buttons", "timestamp", "color")
    }
    kwargs: dict[str, Any] = {
        name: str(data[name]) for name in text_fields if data.get(name) is not None
    }
    return EmbedDescription(
        color=str(data.get("color") or DEFAULT_COLOR),
        timestamp=_coerce_flag(data.get("timestamp")),
        buttons=buttons,
        **kwargs,
    )


def description_to_dict(description: EmbedDescription) -> dict[str, Any]:
    data = dataclasses.asdict(description)
    data["buttons"] = [dataclasses.asdict(b) for b in description.buttons]
    return data
