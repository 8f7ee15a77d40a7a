"""Tests for embed_types.py — builder state values."""

import pytest

from eris_site.embed_types import (
    MAX_BUTTONS,
    ButtonDescription,
    ButtonLimitError,
    EmbedDescription,
    description_from_dict,
    description_to_dict,
)


def test_row_clamped_on_construction():
    assert ButtonDescription(label="x", row=7).row == 4
    assert ButtonDescription(label="x", row=-1).row == 0
    assert ButtonDescription(label="x", row=3).row == 3


def test_with_button_appends_in_order():
    d = EmbedDescription().with_button(ButtonDescription(label="a"))
    d = d.with_button(ButtonDescription(label="b"))

    assert [b.label for b in d.buttons] == ["a", "b"]


def test_with_button_returns_new_value():
    base = EmbedDescription()

    base.with_button(ButtonDescription(label="a"))

    assert base.buttons == ()


def test_without_button():
    d = EmbedDescription(buttons=(ButtonDescription(label="a"), ButtonDescription(label="b")))

    assert [b.label for b in d.without_button(0).buttons] == ["b"]


def test_too_many_buttons_rejected():
    buttons = tuple(ButtonDescription(label=str(i)) for i in range(MAX_BUTTONS + 1))

    with pytest.raises(ButtonLimitError):
        EmbedDescription(buttons=buttons)


def test_list_buttons_stored_as_tuple():
    d = EmbedDescription(buttons=[ButtonDescription(label="a")])  # type: ignore[arg-type]

    assert isinstance(d.buttons, tuple)


def test_from_dict_lenient():
    d = description_from_dict(
        {
            "title": "Hi",
            "unknown": "ignored",
            "buttons": [
                {"label": "Go", "style": "nope", "row": "12"},
                {"label": "Bad row", "row": "x"},
                "not a button",
            ],
        }
    )

    assert d.title == "Hi"
    assert d.color == "#2F3136"
    assert [(b.label, b.style, b.row) for b in d.buttons] == [
        ("Go", "secondary", 4),
        ("Bad row", "secondary", 0),
    ]


def test_from_dict_flags_need_true():
    d = description_from_dict(
        {
            "timestamp": "false",
            "buttons": [
                {"label": "a", "disabled": "false"},
                {"label": "b", "disabled": "true"},
                {"label": "c", "disabled": True},
                {"label": "d", "disabled": 1},
            ],
        }
    )

    assert d.timestamp is False
    assert [b.disabled for b in d.buttons] == [False, True, True, False]


def test_from_dict_rejects_non_list_buttons():
    with pytest.raises(ValueError):
        description_from_dict({"buttons": "Go"})


def test_to_dict_from_dict_identity():
    d = EmbedDescription(
        title="T",
        timestamp=True,
        buttons=(ButtonDescription(label="L", style="link", url="https://x.com", row=2),),
    )

    assert description_from_dict(description_to_dict(d)) == d
