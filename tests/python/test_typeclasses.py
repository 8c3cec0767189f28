"""Tests for type-class environments."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from signet.errors import (
    DuplicateTypeClassError,
    InvalidTypeClassError,
    UnknownTypeClassError,
)
from signet.verifier.typeclasses import TypeClassEnv, shape_predicate


def test_callable_entries_are_used_verbatim() -> None:
    positive = lambda x: x > 0  # noqa: E731
    env = TypeClassEnv({"Positive": positive})
    assert env.lookup("Positive") is positive
    assert "Positive" in env
    assert len(env) == 1


def test_mapping_entries_become_shape_predicates() -> None:
    env = TypeClassEnv({"Named": {"name": "", "id": 0}})
    named = env.require("Named")
    assert named({"name": "a", "id": 1, "extra": True})
    assert not named({"name": "a"})
    assert named(SimpleNamespace(name="a", id=1))
    assert not named(SimpleNamespace(name="a"))
    assert not named(3)


def test_shape_predicate_checks_keys_only() -> None:
    predicate = shape_predicate({"x": 1})
    assert predicate({"x": "anything"})
    assert shape_predicate({})({})


def test_duplicate_registration_fails() -> None:
    env = TypeClassEnv({"Eq": lambda x: True})
    with pytest.raises(DuplicateTypeClassError):
        env.register("Eq", lambda x: False)
    assert env.require("Eq")(None) is True


@pytest.mark.parametrize("name", ["", "Has Space", "Bad-Name", 3])
def test_invalid_names_are_rejected(name: object) -> None:
    with pytest.raises(InvalidTypeClassError):
        TypeClassEnv().register(name, lambda x: True)  # type: ignore[arg-type]


def test_invalid_definitions_are_rejected() -> None:
    with pytest.raises(InvalidTypeClassError):
        TypeClassEnv({"Weird": 42})  # type: ignore[dict-item]


def test_lookup_and_require_for_missing_class() -> None:
    env = TypeClassEnv()
    assert env.lookup("Missing") is None
    with pytest.raises(UnknownTypeClassError) as excinfo:
        env.require("Missing")
    assert excinfo.value.name == "Missing"
    assert isinstance(excinfo.value, LookupError)


def test_decorator_registration_keeps_order() -> None:
    env = TypeClassEnv({"First": lambda x: True})

    @env.type_class("Even")
    def even(value: int) -> bool:
        return value % 2 == 0

    assert even(4)
    assert env.names() == ("First", "Even")
    assert list(env) == ["First", "Even"]
