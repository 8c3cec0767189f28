"""Check a list of runtime values against a parsed type list.

:func:`check_signature` is the heart of signet.  Given expected types and the
actual values (parameters only before the call, parameters plus the result
after it) it verifies, in order:

1. arity;
2. positions with concrete types, against the inferred descriptors;
3. type variables: each occurrence is unwrapped to the depth the signature
   declares and the resulting representative values are collected;
4. consistency, i.e. all representatives of one variable infer to compatible
   descriptors;
5. class constraints, i.e. every class predicate of a variable holds for
   every representative.

The first failure raises the matching :class:`~signet.errors.ContractViolation`
subclass.  Bindings are rebuilt from scratch on every call.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence

from signet.dsl.types import Signature, TypeDescriptor, is_concrete
from signet.errors import (
    ArityMismatchError,
    DepthMismatchError,
    InconsistentTypeVariableError,
    TypeMismatchError,
    UnmetConstraintError,
)

from . import inference
from .typeclasses import TypeClassEnv

__all__ = ["Bindings", "Occurrence", "check_signature", "check_values"]


@dataclass(slots=True, frozen=True)
class Occurrence:
    """A representative value recorded for one type-variable occurrence."""

    position: int
    value: Any
    descriptor: TypeDescriptor


@dataclass(slots=True)
class Bindings:
    """Result of a successful check: every variable's recorded occurrences."""

    occurrences: dict[str, list[Occurrence]] = field(default_factory=dict)

    def add(self, variable: str, occurrence: Occurrence) -> None:
        self.occurrences.setdefault(variable, []).append(occurrence)

    def descriptor(self, variable: str) -> Optional[TypeDescriptor]:
        """Return the descriptor ``variable`` resolved to, if it was observed.

        Wildcard occurrences only constrain the depth, so the first
        non-wildcard descriptor wins.
        """

        found = self.occurrences.get(variable)
        if not found:
            return None
        for occurrence in found:
            if not occurrence.descriptor.is_wildcard:
                return occurrence.descriptor
        return found[0].descriptor

    def __contains__(self, variable: object) -> bool:
        return variable in self.occurrences


def check_signature(
    expected_types: Sequence[TypeDescriptor],
    values: Sequence[Any],
    constraints: Mapping[str, Sequence[str]],
    env: TypeClassEnv,
    *,
    policy: str = "collapse",
) -> Bindings:
    """Verify ``values`` against ``expected_types`` and class ``constraints``.

    Raises
    ------
    ContractViolation
        One of the subclasses in :mod:`signet.errors` describing the first
        rule that failed.
    """

    if len(expected_types) != len(values):
        raise ArityMismatchError(len(expected_types), len(values))

    actual_types = [inference.infer(value, policy) for value in values]

    for position, (expected, actual) in enumerate(zip(expected_types, actual_types)):
        if is_concrete(expected.base_type) and not inference.compare_types(expected, actual):
            raise TypeMismatchError(position, expected, actual)

    bindings = _collect_bindings(expected_types, values, actual_types, policy)
    _check_consistency(bindings)
    _check_constraints(bindings, constraints, env)
    return bindings


def check_values(
    signature: Signature,
    values: Sequence[Any],
    env: TypeClassEnv,
    *,
    include_result: bool = True,
    policy: str = "collapse",
) -> Bindings:
    """Check against a :class:`Signature`, with or without its return slot."""

    expected = signature.types if include_result else signature.parameters
    return check_signature(expected, values, signature.constraints, env, policy=policy)


def _collect_bindings(
    expected_types: Sequence[TypeDescriptor],
    values: Sequence[Any],
    actual_types: Sequence[TypeDescriptor],
    policy: str,
) -> Bindings:
    bindings = Bindings()
    for position, (expected, value, actual) in enumerate(
        zip(expected_types, values, actual_types)
    ):
        if is_concrete(expected.base_type):
            continue
        if expected.depth > actual.depth:
            if actual.is_wildcard:
                continue
            raise DepthMismatchError(position, expected, actual)
        representative = inference.unwrap(value, expected.depth)
        if representative is inference.EMPTY:
            continue
        bindings.add(
            expected.base_type,
            Occurrence(position, representative, inference.infer(representative, policy)),
        )
    return bindings


def _check_consistency(bindings: Bindings) -> None:
    for variable, occurrences in bindings.occurrences.items():
        for left, right in itertools.combinations(occurrences, 2):
            if not inference.compare_types(left.descriptor, right.descriptor):
                raise InconsistentTypeVariableError(
                    variable, [left.descriptor, right.descriptor]
                )


def _check_constraints(
    bindings: Bindings,
    constraints: Mapping[str, Sequence[str]],
    env: TypeClassEnv,
) -> None:
    for variable, class_names in constraints.items():
        occurrences = bindings.occurrences.get(variable, ())
        for class_name in class_names:
            predicate = env.require(class_name)
            for occurrence in occurrences:
                if not predicate(occurrence.value):
                    raise UnmetConstraintError(variable, class_name, occurrence.value)
