"""Type-class environments: named predicates referenced by signatures.

A class is a plain predicate ``(value) -> bool``.  Registering a mapping
instead of a callable creates a structural predicate that accepts any value
carrying every key of the sample::

    env = TypeClassEnv({"Positive": lambda x: x > 0, "Named": {"name": ""}})
    env.lookup("Named")({"name": "x", "age": 3})  # True

Environments are append-only.  Signed functions keep a reference to the
environment they were signed against, so classes registered later are visible
to them as well.
"""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from threading import RLock
from typing import Any, Callable, Iterator, Mapping, Optional, Union

from signet.errors import (
    DuplicateTypeClassError,
    InvalidTypeClassError,
    UnknownTypeClassError,
)

__all__ = ["Predicate", "TypeClassEnv", "shape_predicate"]

Predicate = Callable[[Any], bool]
ClassDefinition = Union[Predicate, Mapping[str, Any]]


def shape_predicate(sample: Mapping[str, Any]) -> Predicate:
    """Build a predicate accepting values that have every key of ``sample``.

    Mappings are checked for key membership, other objects for attributes.
    """

    keys = tuple(sample.keys())

    def has_shape(value: Any) -> bool:
        if isinstance(value, MappingABC):
            return all(key in value for key in keys)
        return all(isinstance(key, str) and hasattr(value, key) for key in keys)

    has_shape.__name__ = f"has_shape_{'_'.join(str(key) for key in keys) or 'any'}"
    has_shape.__qualname__ = has_shape.__name__
    return has_shape


class TypeClassEnv:
    """Append-only registry mapping class names to predicates."""

    def __init__(self, classes: Optional[Mapping[str, ClassDefinition]] = None) -> None:
        self._lock = RLock()
        self._predicates: dict[str, Predicate] = {}
        for name, definition in (classes or {}).items():
            self.register(name, definition)

    def register(self, name: str, definition: ClassDefinition) -> Predicate:
        """Add class ``name`` and return its normalised predicate."""

        if not isinstance(name, str) or not name or not all(
            ch.isalnum() or ch == "_" for ch in name
        ):
            raise InvalidTypeClassError(f"invalid type class name: {name!r}")
        if callable(definition):
            predicate = definition
        elif isinstance(definition, MappingABC):
            predicate = shape_predicate(definition)
        else:
            raise InvalidTypeClassError(
                f"type class {name} must be a predicate or a mapping, "
                f"got {type(definition).__name__}"
            )
        with self._lock:
            if name in self._predicates:
                raise DuplicateTypeClassError(name)
            self._predicates[name] = predicate
        return predicate

    def type_class(self, name: str) -> Callable[[Predicate], Predicate]:
        """Decorator form of :meth:`register`."""

        def decorator(fn: Predicate) -> Predicate:
            self.register(name, fn)
            return fn

        return decorator

    def lookup(self, name: str) -> Optional[Predicate]:
        return self._predicates.get(name)

    def require(self, name: str, signature: Optional[str] = None) -> Predicate:
        predicate = self._predicates.get(name)
        if predicate is None:
            raise UnknownTypeClassError(name, signature)
        return predicate

    def names(self) -> tuple[str, ...]:
        with self._lock:
            return tuple(self._predicates)

    def __contains__(self, name: object) -> bool:
        return name in self._predicates

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._predicates)

    def __repr__(self) -> str:
        return f"TypeClassEnv({', '.join(self.names())})"
