"""
Tests for identifier references and boundary coercion.
"""

import pytest

from permguard.core.exceptions import UnsupportedInputKindError
from permguard.core.refs import IDList, NameList, SingleID, SingleName, as_ref, is_plural


# ── Construction ────────────────────────────────────────────────


def test_single_name_exposes_guard_name():
    assert SingleName("Create Contact").guard_name == "create-contact"


def test_name_list_exposes_guard_names():
    ref = NameList(["Create Contact", "delete-user"])
    assert ref.names == ("Create Contact", "delete-user")
    assert ref.guard_names == ["create-contact", "delete-user"]


def test_mixed_name_list_cannot_be_built():
    with pytest.raises(UnsupportedInputKindError):
        NameList(["admin", 3])


def test_mixed_id_list_cannot_be_built():
    with pytest.raises(UnsupportedInputKindError):
        IDList([1, "admin"])


@pytest.mark.parametrize("value", [True, 1.5, "3"])
def test_single_id_rejects_non_integers(value):
    with pytest.raises(UnsupportedInputKindError):
        SingleID(value)


def test_refs_are_hashable_and_comparable():
    assert IDList([1, 2]) == IDList((1, 2))
    assert len({SingleName("a"), SingleName("a")}) == 1


def test_is_plural():
    assert is_plural(NameList(["a"]))
    assert is_plural(IDList([1]))
    assert not is_plural(SingleName("a"))
    assert not is_plural(SingleID(1))


# ── as_ref ──────────────────────────────────────────────────────


def test_as_ref_passes_variants_through():
    ref = IDList([4, 5])
    assert as_ref(ref) is ref


@pytest.mark.parametrize(
    "value, expected",
    [
        ("admin", SingleName("admin")),
        (7, SingleID(7)),
        (["admin", "editor"], NameList(["admin", "editor"])),
        (("admin",), NameList(["admin"])),
        ([3, 1], IDList([3, 1])),
        ({3, 1, 2}, IDList([1, 2, 3])),
        (frozenset({"b", "a"}), NameList(["a", "b"])),
        ([], IDList([])),
        (set(), IDList([])),
    ],
)
def test_as_ref_converts_plain_values(value, expected):
    assert as_ref(value) == expected


@pytest.mark.parametrize(
    "value",
    [
        True,
        False,
        1.0,
        None,
        {"admin": 1},
        ["admin", 1],
        {"admin", 1},
        [["admin"]],
        [True, False],
    ],
)
def test_as_ref_rejects_unsupported_values(value):
    with pytest.raises(UnsupportedInputKindError):
        as_ref(value)


def test_unsupported_input_is_a_type_error():
    with pytest.raises(TypeError):
        as_ref(2.5)
