"""Exception hierarchy shared by the signature parser and the runtime checker.

Failures fall into two groups that surface at different moments:

* construction time, while a signature is parsed and signed
  (:class:`SignatureSyntaxError` and the :class:`TypeClassError` family);
* call time, while a signed function runs (:class:`ContractViolation` and its
  subclasses).

Every call-time error carries a :class:`ViolationKind` so callers can branch on
``exc.kind`` instead of parsing messages.
"""

from __future__ import annotations

import enum
from typing import TYPE_CHECKING, Optional, Sequence

if TYPE_CHECKING:  # pragma: no cover
    from signet.dsl.types import TypeDescriptor

__all__ = [
    "ArityMismatchError",
    "ContractViolation",
    "DepthMismatchError",
    "DuplicateTypeClassError",
    "HeterogeneousArrayError",
    "InconsistentTypeVariableError",
    "InvalidTypeClassError",
    "SignatureSyntaxError",
    "SignetError",
    "TypeClassError",
    "TypeMismatchError",
    "UnknownTypeClassError",
    "UnmetConstraintError",
    "ViolationKind",
]


class SignetError(Exception):
    """Base class for every error raised by signet."""


# ---------------------------------------------------------------------------
# Construction time


class SignatureSyntaxError(SignetError, SyntaxError):
    """Raised when a signature string does not follow the grammar."""

    def __init__(
        self,
        message: str,
        signature: str,
        *,
        reason: str,
        column: Optional[int] = None,
    ) -> None:
        location = f" at column {column}" if column is not None else ""
        super().__init__(f"Malformed signature{location}: {message} in {signature!r}")
        self.message = message
        self.signature = signature
        self.reason = reason
        self.column = column


class TypeClassError(SignetError):
    """Base class for type-class environment errors."""


class UnknownTypeClassError(TypeClassError, LookupError):
    """A signature references a class that is not registered."""

    def __init__(self, name: str, signature: Optional[str] = None) -> None:
        suffix = f" (referenced by {signature!r})" if signature else ""
        super().__init__(f"Type class is not defined: {name}{suffix}")
        self.name = name
        self.signature = signature


class DuplicateTypeClassError(TypeClassError):
    """A class name is registered twice in the same environment."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Type class already defined: {name}")
        self.name = name


class InvalidTypeClassError(TypeClassError, ValueError):
    """A class entry has an unusable name or definition."""


# ---------------------------------------------------------------------------
# Call time


class ViolationKind(str, enum.Enum):
    ARITY = "arity"
    TYPE_MISMATCH = "type_mismatch"
    DEPTH_MISMATCH = "depth_mismatch"
    INCONSISTENT_VARIABLE = "inconsistent_variable"
    UNMET_CONSTRAINT = "unmet_constraint"
    HETEROGENEOUS_ARRAY = "heterogeneous_array"


class ContractViolation(SignetError, TypeError):
    """A signed function was called with, or returned, a non-conforming value.

    ``stage`` is ``None`` when the checker is used directly and ``"pre"`` or
    ``"post"`` once the error passed through a signed wrapper.
    """

    kind: ViolationKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.stage: Optional[str] = None

    def __str__(self) -> str:
        if self.stage is None:
            return self.message
        return f"[{self.stage}-check] {self.message}"


class ArityMismatchError(ContractViolation):
    kind = ViolationKind.ARITY

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"Type list doesn't match actual values. Bad type count: "
            f"expected {expected}, got {actual}"
        )
        self.expected = expected
        self.actual = actual


class TypeMismatchError(ContractViolation):
    kind = ViolationKind.TYPE_MISMATCH

    def __init__(
        self, position: int, expected: "TypeDescriptor", actual: "TypeDescriptor"
    ) -> None:
        super().__init__(
            f"Type list doesn't match actual values. Wrong types at position "
            f"{position}: expected {expected}, got {actual}"
        )
        self.position = position
        self.expected = expected
        self.actual = actual


class DepthMismatchError(ContractViolation):
    kind = ViolationKind.DEPTH_MISMATCH

    def __init__(
        self, position: int, expected: "TypeDescriptor", actual: "TypeDescriptor"
    ) -> None:
        super().__init__(
            f"Array depth mismatch at position {position}: expected {expected} "
            f"(depth {expected.depth}), got {actual} (depth {actual.depth})"
        )
        self.position = position
        self.expected = expected
        self.actual = actual


class InconsistentTypeVariableError(ContractViolation):
    kind = ViolationKind.INCONSISTENT_VARIABLE

    def __init__(self, variable: str, descriptors: Sequence["TypeDescriptor"]) -> None:
        joined = ", ".join(str(item) for item in descriptors)
        super().__init__(
            f"Inconsistent type variable {variable}: bound to {joined}"
        )
        self.variable = variable
        self.descriptors = tuple(descriptors)


class UnmetConstraintError(ContractViolation):
    kind = ViolationKind.UNMET_CONSTRAINT

    def __init__(self, variable: str, type_class: str, value: object) -> None:
        super().__init__(
            f"Unmet class constraint {type_class} on type variable {variable} "
            f"(value {value!r})"
        )
        self.variable = variable
        self.type_class = type_class
        self.value = value


class HeterogeneousArrayError(ContractViolation):
    kind = ViolationKind.HETEROGENEOUS_ARRAY

    def __init__(self, descriptors: Sequence["TypeDescriptor"]) -> None:
        joined = ", ".join(str(item) for item in descriptors)
        super().__init__(f"Heterogeneous array elements: {joined}")
        self.descriptors = tuple(descriptors)
