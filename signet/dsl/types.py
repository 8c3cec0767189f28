"""Data model for parsed signet signatures.

A signature such as ``Num a, Ord a => [a] -> a`` is represented by two plain,
immutable records: :class:`TypeDescriptor` for every entry of the ``->``
separated type list and :class:`Signature` for the whole contract.  The same
descriptor type is produced by runtime inference
(:mod:`signet.verifier.inference`), so parsed and inferred types compare
directly.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterator, Mapping

__all__ = [
    "CONCRETE_TYPES",
    "Signature",
    "TypeDescriptor",
    "WILDCARD",
    "is_concrete",
]


# ---------------------------------------------------------------------------
# Base type names

CONCRETE_TYPES: frozenset[str] = frozenset(
    {"string", "number", "boolean", "object", "function", "symbol"}
)

# Only ever produced by inference (an empty array), never by the parser.
WILDCARD = "undefined"


def is_concrete(base_type: str) -> bool:
    """Return ``True`` when ``base_type`` names a fixed primitive kind."""

    return base_type in CONCRETE_TYPES


# ---------------------------------------------------------------------------
# Records


@dataclass(slots=True, frozen=True)
class TypeDescriptor:
    """A base type wrapped in ``depth`` levels of homogeneous arrays."""

    base_type: str
    depth: int = 0

    def __post_init__(self) -> None:
        if self.depth < 0:
            raise ValueError(f"type depth must be non-negative, got {self.depth}")

    @property
    def is_variable(self) -> bool:
        return not is_concrete(self.base_type) and self.base_type != WILDCARD

    @property
    def is_wildcard(self) -> bool:
        return self.base_type == WILDCARD

    def __str__(self) -> str:
        return f"{'[' * self.depth}{self.base_type}{']' * self.depth}"


@dataclass(slots=True, frozen=True)
class Signature:
    """Parsed contract: class constraints plus parameter and return types.

    ``types[-1]`` is the return type; the preceding entries are the parameter
    types in call order.  ``constraints`` maps a type variable to the ordered
    class names it must satisfy and is exposed as a read-only mapping.
    """

    types: tuple[TypeDescriptor, ...]
    constraints: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )
    source: str = ""

    def __post_init__(self) -> None:
        if not self.types:
            raise ValueError("a signature needs at least a return type")
        if not isinstance(self.constraints, MappingProxyType):
            frozen = {name: tuple(classes) for name, classes in self.constraints.items()}
            object.__setattr__(self, "constraints", MappingProxyType(frozen))

    @property
    def parameters(self) -> tuple[TypeDescriptor, ...]:
        return self.types[:-1]

    @property
    def result(self) -> TypeDescriptor:
        return self.types[-1]

    @property
    def arity(self) -> int:
        return len(self.types) - 1

    @property
    def variables(self) -> tuple[str, ...]:
        """Type variable names in order of first appearance."""

        seen: dict[str, None] = {}
        for typ in self.types:
            if typ.is_variable:
                seen.setdefault(typ.base_type, None)
        return tuple(seen)

    def class_names(self) -> Iterator[str]:
        """Yield every referenced type-class name once, in declaration order."""

        seen: set[str] = set()
        for classes in self.constraints.values():
            for name in classes:
                if name not in seen:
                    seen.add(name)
                    yield name

    def __hash__(self) -> int:
        return hash((self.types, tuple(sorted(self.constraints.items()))))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Signature):
            return NotImplemented
        return self.types == other.types and dict(self.constraints) == dict(
            other.constraints
        )
