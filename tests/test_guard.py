"""
Tests for guard-name canonicalization.
"""

import pytest

from permguard.core.guard import canonicalize, canonicalize_all


@pytest.mark.parametrize(
    "name, expected",
    [
        ("Create Contact", "create-contact"),
        ("Create $#% Contact!", "create-contact"),
        ("  Senior   Associate  ", "senior-associate"),
        ("delete-user", "delete-user"),
        ("Café Manager", "cafe-manager"),
        ("API_v2 Access", "api-v2-access"),
        ("!!!", ""),
    ],
)
def test_canonicalize(name, expected):
    assert canonicalize(name) == expected


@pytest.mark.parametrize("name", ["Create $#% Contact!", "--x--Y--", "Ünïcödé  Rôle", "a"])
def test_canonicalize_is_idempotent(name):
    once = canonicalize(name)
    assert canonicalize(once) == once


def test_colliding_display_names_share_a_guard_name():
    assert canonicalize("Edit Post") == canonicalize("edit_post") == canonicalize("EDIT   POST!")


def test_canonicalize_all_keeps_order():
    assert canonicalize_all(["B Role", "A Role"]) == ["b-role", "a-role"]
