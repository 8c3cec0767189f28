"""Wrap callables so every call is checked against a signature.

``sign(env, "Ord a => [a] -> a", fn)`` parses the signature once, confirms that
every referenced class exists in ``env`` and returns a wrapper that checks the
arguments before calling ``fn`` and the arguments plus the result afterwards.

The post-check runs after ``fn`` has returned, so a failing post-check cannot
undo side effects ``fn`` already performed.
"""

from __future__ import annotations

import functools
from typing import Any, Callable, Mapping, Optional, TypeVar, Union, overload

from signet.dsl.grammar import parse_signature
from signet.dsl.types import Signature
from signet.errors import ContractViolation, UnknownTypeClassError
from signet.telemetry import hooks, logger
from signet.utils.config import SignetConfig, default_config

from .checker import check_values
from .typeclasses import ClassDefinition, TypeClassEnv

__all__ = ["make_signer", "sign"]

F = TypeVar("F", bound=Callable[..., Any])

_LOGGER = logger.get_logger("signet.verifier.signer")


@overload
def sign(
    env: TypeClassEnv, signature: str, fn: F, *, config: Optional[SignetConfig] = None
) -> F: ...


@overload
def sign(
    env: TypeClassEnv, signature: str, fn: None = None, *, config: Optional[SignetConfig] = None
) -> Callable[[F], F]: ...


def sign(
    env: TypeClassEnv,
    signature: str,
    fn: Optional[Callable[..., Any]] = None,
    *,
    config: Optional[SignetConfig] = None,
) -> Any:
    """Return ``fn`` wrapped with runtime checks for ``signature``.

    Without ``fn`` a decorator is returned.  Syntax errors and references to
    unknown classes are raised here, before any call happens.
    """

    if not isinstance(env, TypeClassEnv):
        raise TypeError(f"env must be a TypeClassEnv, got {type(env).__name__}")
    parsed = parse_signature(signature)
    for class_name in parsed.class_names():
        if class_name not in env:
            raise UnknownTypeClassError(class_name, signature)
    settings = config if config is not None else default_config()

    def decorator(target: Callable[..., Any]) -> Callable[..., Any]:
        if not callable(target):
            raise TypeError(f"cannot sign non-callable {target!r}")
        _LOGGER.debug("signing %s with %r", _name_of(target), signature)
        if settings.emit_hooks and hooks.observed(hooks.CONTRACT_SIGNED):
            hooks.emit(hooks.ContractEvent.signed(_name_of(target), signature))
        if not settings.enabled:
            return target
        return _wrap(env, parsed, target, settings)

    if fn is None:
        return decorator
    return decorator(fn)


def make_signer(
    type_classes: Union[TypeClassEnv, Mapping[str, ClassDefinition], None] = None,
    *,
    config: Optional[SignetConfig] = None,
) -> Callable[..., Any]:
    """Bind an environment once and return ``sign`` partially applied.

    ``type_classes`` is either an existing :class:`TypeClassEnv` (shared by
    reference) or a plain mapping of class definitions.
    """

    if isinstance(type_classes, TypeClassEnv):
        env = type_classes
    else:
        env = TypeClassEnv(type_classes)
    return functools.partial(sign, env, config=config)


def _wrap(
    env: TypeClassEnv,
    signature: Signature,
    fn: Callable[..., Any],
    settings: SignetConfig,
) -> Callable[..., Any]:
    policy = settings.heterogeneous_arrays

    @functools.wraps(fn)
    def signed(*args: Any, **kwargs: Any) -> Any:
        if kwargs:
            raise TypeError(
                f"{_name_of(fn)}() is signed with {signature.source!r} and only accepts "
                f"positional arguments, got {', '.join(sorted(kwargs))}"
            )
        _run_check(env, signature, fn, args, include_result=False, policy=policy, settings=settings)
        result = fn(*args)
        if settings.check_results:
            _run_check(
                env,
                signature,
                fn,
                args + (result,),
                include_result=True,
                policy=policy,
                settings=settings,
            )
        return result

    signed.__signature_contract__ = signature  # type: ignore[attr-defined]
    return signed


def _run_check(
    env: TypeClassEnv,
    signature: Signature,
    fn: Callable[..., Any],
    values: tuple[Any, ...],
    *,
    include_result: bool,
    policy: str,
    settings: SignetConfig,
) -> None:
    stage = "post" if include_result else "pre"
    try:
        check_values(signature, values, env, include_result=include_result, policy=policy)
    except ContractViolation as exc:
        exc.stage = stage
        _LOGGER.debug("%s-check failed for %s: %s", stage, _name_of(fn), exc.message)
        if settings.emit_hooks and hooks.observed(hooks.CONTRACT_VIOLATION):
            hooks.emit(hooks.ContractEvent.from_violation(exc, _name_of(fn), signature.source))
        raise


def _name_of(fn: Callable[..., Any]) -> str:
    return getattr(fn, "__qualname__", None) or getattr(fn, "__name__", None) or repr(fn)
