"""Structural type inference for runtime values.

Python values are mapped onto the small set of primitive kinds the signature
language knows about (``string``, ``number``, ``boolean``, ``object``,
``function``, ``symbol``).  Lists and tuples are arrays: their descriptor is
the element descriptor one level deeper, provided every element infers to
the identical descriptor.

An empty array cannot reveal its element type and infers to the wildcard
``[undefined]``, which :func:`compare_types` accepts wherever an array of at
least the same depth is expected.
"""

from __future__ import annotations

import enum
import numbers
from typing import Any, Sequence

from signet.dsl.types import WILDCARD, TypeDescriptor
from signet.errors import HeterogeneousArrayError

__all__ = [
    "EMPTY",
    "compare_types",
    "infer",
    "is_array",
    "kind_of",
    "unwrap",
]

ARRAY_TYPES = (list, tuple)
OPAQUE = TypeDescriptor("object", 0)


class _Empty:
    """Sentinel returned by :func:`unwrap` when it runs into an empty array."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "EMPTY"


EMPTY = _Empty()


def is_array(value: Any) -> bool:
    return isinstance(value, ARRAY_TYPES)


def kind_of(value: Any) -> str:
    """Return the primitive kind of a non-array value."""

    if isinstance(value, str):
        return "string"
    # bool is a numbers.Number subclass, so it must be tested first.
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, numbers.Number):
        return "number"
    if isinstance(value, enum.Enum):
        return "symbol"
    if callable(value):
        return "function"
    return "object"


def compare_types(left: TypeDescriptor, right: TypeDescriptor) -> bool:
    """Return ``True`` when two descriptors are compatible.

    Descriptors match on ``(base_type, depth)``; the wildcard additionally
    matches any descriptor that is at least as deep as itself.
    """

    if left.base_type == right.base_type and left.depth == right.depth:
        return True
    if left.base_type == WILDCARD and left.depth <= right.depth:
        return True
    if right.base_type == WILDCARD and right.depth <= left.depth:
        return True
    return False


def infer(value: Any, policy: str = "collapse") -> TypeDescriptor:
    """Infer the descriptor of ``value``.

    ``policy`` decides what happens to arrays whose elements disagree:
    ``"collapse"`` treats the array as an opaque ``object`` and ``"raise"``
    raises :class:`HeterogeneousArrayError`.
    """

    if not is_array(value):
        return TypeDescriptor(kind_of(value), 0)
    if not value:
        return TypeDescriptor(WILDCARD, 1)

    elements = [infer(item, policy) for item in value]
    first = elements[0]
    # Exact agreement only: a wildcard element next to a typed one is mixed content.
    if any(descriptor != first for descriptor in elements[1:]):
        if policy == "raise":
            raise HeterogeneousArrayError(_distinct(elements))
        return OPAQUE
    return TypeDescriptor(first.base_type, first.depth + 1)


def unwrap(value: Any, depth: int) -> Any:
    """Descend ``depth`` levels into nested arrays through first elements.

    Returns :data:`EMPTY` if an empty array is reached before ``depth``
    levels were consumed.
    """

    current = value
    for _ in range(depth):
        if not is_array(current):
            raise ValueError(f"cannot unwrap {depth} levels of {value!r}")
        if not current:
            return EMPTY
        current = current[0]
    return current


def _distinct(descriptors: Sequence[TypeDescriptor]) -> list[TypeDescriptor]:
    seen: dict[TypeDescriptor, None] = {}
    for descriptor in descriptors:
        seen.setdefault(descriptor, None)
    return list(seen)
