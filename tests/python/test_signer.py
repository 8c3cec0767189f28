"""End-to-end tests for signed functions."""

from __future__ import annotations

from typing import Any

import pytest

from signet import (
    ArityMismatchError,
    ContractViolation,
    DepthMismatchError,
    HeterogeneousArrayError,
    InconsistentTypeVariableError,
    SignatureSyntaxError,
    SignetConfig,
    TypeClassEnv,
    TypeMismatchError,
    UnknownTypeClassError,
    UnmetConstraintError,
    ViolationKind,
    make_signer,
    sign,
)
from signet.telemetry import hooks
from signet.utils import config as config_module


def identity(value: Any) -> Any:
    return value


def returning(result: Any):
    return lambda *args: result


@pytest.fixture(autouse=True)
def _no_config_file(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(config_module.CONFIG_ENV, raising=False)


@pytest.mark.parametrize(
    "value",
    [0, -3.5, "text", True, None, {"k": 1}, [1, 2], [[]], [["a"], []], len, (1, 2)],
)
def test_identity_always_passes(value: Any) -> None:
    wrapped = sign(TypeClassEnv(), "a->a", identity)
    assert wrapped(value) is value


@pytest.mark.parametrize(
    "argument, result",
    [(1, "1"), ("a", 1), (True, 1), ([1], 1), ({}, [1])],
)
def test_result_of_another_kind_is_inconsistent(argument: Any, result: Any) -> None:
    wrapped = sign(TypeClassEnv(), "a->a", returning(result))
    with pytest.raises(InconsistentTypeVariableError) as excinfo:
        wrapped(argument)
    assert excinfo.value.stage == "post"
    assert str(excinfo.value).startswith("[post-check]")


def test_arity_is_checked_before_the_call() -> None:
    calls: list[tuple[Any, ...]] = []

    def pick_first(*args: Any) -> Any:
        calls.append(args)
        return args[0]

    wrapped = sign(TypeClassEnv(), "a->a->a", pick_first)
    with pytest.raises(ArityMismatchError) as excinfo:
        wrapped(1)
    assert excinfo.value.stage == "pre"
    assert calls == []

    assert wrapped(1, 2) == 1
    with pytest.raises(InconsistentTypeVariableError):
        wrapped(1, "2")


@pytest.mark.parametrize("result", [1, "x", None, [1], [[True]]])
def test_empty_array_never_breaks_consistency(result: Any) -> None:
    wrapped = sign(TypeClassEnv(), "[a]->a", returning(result))
    assert wrapped([]) == result


def test_depth_mismatch_is_reported() -> None:
    wrapped = sign(TypeClassEnv(), "[[a]]->a", returning(1))
    with pytest.raises(DepthMismatchError):
        wrapped([1, 2])


def test_empty_sibling_does_not_hide_nested_elements() -> None:
    with pytest.raises(DepthMismatchError) as excinfo:
        sign(TypeClassEnv(), "[[a]] -> a", returning("anything"))([[], [2]])
    assert excinfo.value.stage == "pre"

    env = TypeClassEnv({"Positive": lambda x: x > 0})
    wrapped = sign(env, "Positive a => [[a]] -> number", returning(1))
    with pytest.raises(ContractViolation) as excinfo:
        wrapped([[], [-5]])
    assert excinfo.value.kind is ViolationKind.DEPTH_MISMATCH
    with pytest.raises(UnmetConstraintError):
        wrapped([[-5]])
    assert wrapped([[5]]) == 1

    with pytest.raises(TypeMismatchError):
        sign(TypeClassEnv(), "[[number]] -> number", returning(1))([[], [1]])


def test_constraint_satisfaction() -> None:
    env = TypeClassEnv({"Positive": lambda x: x > 0})

    with pytest.raises(UnmetConstraintError) as excinfo:
        sign(env, "Positive a => a->a", identity)(-1)
    assert excinfo.value.type_class == "Positive"
    assert excinfo.value.variable == "a"
    assert excinfo.value.stage == "pre"

    assert sign(env, "Positive a => a->a", identity)(5) == 5

    with pytest.raises(UnmetConstraintError) as excinfo:
        sign(env, "Positive a => a->a", returning(-1))(5)
    assert excinfo.value.stage == "post"


def test_unknown_class_fails_at_sign_time() -> None:
    env = TypeClassEnv({"Bar": identity})
    calls: list[Any] = []
    with pytest.raises(UnknownTypeClassError) as excinfo:
        sign(env, "Foo a => a->a", calls.append)
    assert excinfo.value.name == "Foo"
    assert calls == []


def test_syntax_errors_fail_at_sign_time() -> None:
    with pytest.raises(SignatureSyntaxError):
        sign(TypeClassEnv(), "a", identity)


def test_side_effects_survive_failed_post_check() -> None:
    log: list[str] = []

    def write(entry: str) -> int:
        log.append(entry)
        return len(log)

    wrapped = sign(TypeClassEnv(), "string -> string", write)
    with pytest.raises(TypeMismatchError) as excinfo:
        wrapped("hello")
    assert excinfo.value.stage == "post"
    assert log == ["hello"]


def test_zero_arity_functions() -> None:
    wrapped = sign(TypeClassEnv(), "() -> [[number]]", returning([[1]]))
    assert wrapped() == [[1]]
    with pytest.raises(ArityMismatchError):
        wrapped(1)


def test_keyword_arguments_are_rejected() -> None:
    wrapped = sign(TypeClassEnv(), "a -> a", identity)
    with pytest.raises(TypeError) as excinfo:
        wrapped(value=1)
    assert not isinstance(excinfo.value, ContractViolation)


def test_decorator_form_keeps_metadata() -> None:
    env = TypeClassEnv({"Ord": lambda x: hasattr(x, "__lt__")})

    @sign(env, "Ord a => [a] -> a")
    def smallest(values: list[Any]) -> Any:
        """Return the smallest element."""
        return min(values)

    assert smallest([3, 1, 2]) == 1
    assert smallest.__name__ == "smallest"
    assert smallest.__doc__ == "Return the smallest element."
    assert smallest.__signature_contract__.source == "Ord a => [a] -> a"
    assert smallest.__wrapped__([5]) == 5


def test_environment_is_shared_by_reference() -> None:
    env = TypeClassEnv({"Small": lambda x: x < 10})
    wrapped = sign(env, "Small a => a -> a", identity)
    env.register("Late", lambda x: True)

    assert "Late" in env
    assert sign(env, "Late a, Small a => a -> a", identity)(3) == 3
    assert wrapped(3) == 3


def test_make_signer_builds_environment_from_mapping() -> None:
    signer = make_signer({"Named": {"name": ""}, "Any": lambda x: True})
    greet = signer("Named a => a -> string", lambda person: f"hi {person['name']}")
    assert greet({"name": "ada"}) == "hi ada"
    with pytest.raises(UnmetConstraintError):
        greet({"nom": "ada"})


def test_make_signer_reuses_existing_environment() -> None:
    env = TypeClassEnv()
    signer = make_signer(env)
    env.register("Even", lambda x: x % 2 == 0)
    assert signer("Even a => a -> a", identity)(4) == 4


def test_violation_event_describes_the_failure() -> None:
    events: list[hooks.ContractEvent] = []
    wrapped = sign(TypeClassEnv(), "number -> number", returning("nope"))
    with hooks.subscribe(hooks.CONTRACT_VIOLATION, events.append):
        with pytest.raises(TypeMismatchError):
            wrapped(1)
    assert len(events) == 1
    event = events[0]
    assert event.is_violation
    assert event.stage == "post"
    assert event.kind is ViolationKind.TYPE_MISMATCH
    assert event.position == 1
    assert event.variable is None
    assert event.signature == "number -> number"
    assert event.function.endswith("<lambda>")


def test_unmet_constraint_event_names_variable_and_class() -> None:
    events: list[hooks.ContractEvent] = []
    env = TypeClassEnv({"Positive": lambda x: x > 0})
    wrapped = sign(env, "Positive a => a -> a", identity)
    with hooks.subscribe(hooks.CONTRACT_VIOLATION, events.append):
        with pytest.raises(UnmetConstraintError):
            wrapped(-2)
    (event,) = events
    assert event.stage == "pre"
    assert event.kind is ViolationKind.UNMET_CONSTRAINT
    assert (event.variable, event.type_class) == ("a", "Positive")
    assert event.position is None


def test_signing_emits_an_event() -> None:
    events: list[hooks.ContractEvent] = []
    with hooks.subscribe(hooks.CONTRACT_SIGNED, events.append):
        sign(TypeClassEnv(), "a -> a", identity)
        sign(TypeClassEnv(), "a -> a", identity, config=SignetConfig(emit_hooks=False))
    assert [(event.function, event.signature) for event in events] == [("identity", "a -> a")]
    assert not events[0].is_violation


def test_failing_hook_does_not_mask_violation() -> None:
    def broken(event: hooks.ContractEvent) -> None:
        raise RuntimeError("hook failure")

    wrapped = sign(TypeClassEnv(), "number -> number", identity)
    with hooks.subscribe(hooks.CONTRACT_VIOLATION, broken):
        with pytest.raises(TypeMismatchError):
            wrapped("x")


def test_disabled_config_returns_function_unwrapped() -> None:
    settings = SignetConfig(enabled=False)
    assert sign(TypeClassEnv(), "number -> number", identity, config=settings) is identity
    with pytest.raises(UnknownTypeClassError):
        sign(TypeClassEnv(), "Foo a => a -> a", identity, config=settings)


def test_result_checks_can_be_skipped() -> None:
    settings = SignetConfig(check_results=False)
    wrapped = sign(TypeClassEnv(), "number -> number", returning("x"), config=settings)
    assert wrapped(1) == "x"
    with pytest.raises(TypeMismatchError):
        wrapped("1")


def test_strict_heterogeneous_policy() -> None:
    settings = SignetConfig(heterogeneous_arrays="raise")
    wrapped = sign(TypeClassEnv(), "a -> a", identity, config=settings)
    with pytest.raises(HeterogeneousArrayError) as excinfo:
        wrapped([1, "x"])
    assert excinfo.value.kind is ViolationKind.HETEROGENEOUS_ARRAY
    assert sign(TypeClassEnv(), "a -> a", identity)([1, "x"]) == [1, "x"]


def test_config_file_from_environment(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    path = tmp_path / "signet.yaml"
    path.write_text("enabled: false\n", encoding="utf-8")
    monkeypatch.setenv(config_module.CONFIG_ENV, str(path))
    assert sign(TypeClassEnv(), "number -> number", identity) is identity


def test_env_argument_must_be_an_environment() -> None:
    with pytest.raises(TypeError):
        sign({"Eq": identity}, "a -> a", identity)  # type: ignore[arg-type]
