"""Parser for the signet signature language.

Grammar::

    signature  := [constraint (',' constraint)* '=>'] type_list
    constraint := ClassName Variable
    type_list  := type ('->' type)+
    type       := '['* Identifier ']'*   |   '()'

The leading ``()`` placeholder marks a function without parameters and is
dropped from the parsed type list.  Parsing is done in two passes: cheap
whole-string validation (character allow-lists, bracket scan, arrow count)
followed by a small hand-written scanner per ``->`` segment, so errors point at
the column where the input first went wrong.
"""

from __future__ import annotations

import functools
import re
from dataclasses import dataclass
from typing import Optional

from signet.errors import SignatureSyntaxError
from signet.telemetry import logger

from .types import WILDCARD, Signature, TypeDescriptor, is_concrete

__all__ = ["SignatureSyntaxError", "Segment", "parse_constraints", "parse_signature", "parse_type"]

CONSTRAINT_SEPARATOR = "=>"
ARROW = "->"
UNIT = "()"

_TYPE_LIST_ALLOWED = re.compile(r"[^\w\s\-\>\(\)\[\]]")
_CONSTRAINTS_ALLOWED = re.compile(r"[^\w\s,]")

_LOGGER = logger.get_logger("signet.dsl.grammar")


@dataclass(slots=True)
class Segment:
    """One ``->`` separated slice of the type list, with its source offset."""

    text: str
    offset: int


# ---------------------------------------------------------------------------
# Entry points


@functools.lru_cache(maxsize=512)
def parse_signature(signature: str) -> Signature:
    """Parse ``signature`` into an immutable :class:`Signature`.

    Raises
    ------
    SignatureSyntaxError
        If the text is not a well-formed signature.  The error's ``reason``
        attribute names the failed rule.
    """

    if not isinstance(signature, str):
        raise TypeError(f"signature must be a string, got {type(signature).__name__}")

    head, sep, tail = signature.partition(CONSTRAINT_SEPARATOR)
    if sep:
        unparsed_constraints: Optional[str] = head
        unparsed_types = tail
        types_offset = len(head) + len(sep)
    else:
        unparsed_constraints = None
        unparsed_types = signature
        types_offset = 0

    parser = _SignatureParser(signature, types_offset)
    types = parser.parse_type_list(unparsed_types)
    constraints = (
        parser.parse_constraint_block(unparsed_constraints)
        if unparsed_constraints is not None
        else {}
    )
    _warn_unused_constraints(signature, constraints, types)
    return Signature(types=types, constraints=constraints, source=signature)


def parse_type(text: str) -> TypeDescriptor:
    """Parse a single bracketed type such as ``[[number]]``."""

    parser = _SignatureParser(text, 0)
    parser.check_brackets(text)
    descriptor = parser.parse_segment(Segment(text, 0), first=True)
    if descriptor is None:
        raise SignatureSyntaxError("'()' is not a type", text, reason="malformed_type", column=1)
    return descriptor


def parse_constraints(text: str) -> dict[str, tuple[str, ...]]:
    """Parse a bare constraint block such as ``Num a, Ord a``."""

    return _SignatureParser(text, 0).parse_constraint_block(text)


# ---------------------------------------------------------------------------
# Parser


class _SignatureParser:
    """Stateless helpers bound to the signature being parsed.

    ``types_offset`` is where the type list starts inside the full signature so
    reported columns refer to the original text (1-based).
    """

    def __init__(self, signature: str, types_offset: int) -> None:
        self.signature = signature
        self.types_offset = types_offset

    def _error(self, message: str, reason: str, index: Optional[int] = None) -> SignatureSyntaxError:
        column = None if index is None else index + 1
        return SignatureSyntaxError(message, self.signature, reason=reason, column=column)

    # ------------------------------------------------------------------
    # Type list

    def parse_type_list(self, text: str) -> tuple[TypeDescriptor, ...]:
        if not text.strip():
            raise self._error("Empty type list", "empty")

        invalid = _TYPE_LIST_ALLOWED.search(text)
        if invalid:
            raise self._error(
                f"Invalid character {invalid.group()!r} in type list",
                "invalid_characters",
                self.types_offset + invalid.start(),
            )

        self.check_brackets(text, self.types_offset)

        segments = self._split_segments(text)
        if len(segments) < 2:
            raise self._error("Too few types in type list", "too_few_types")

        types: list[TypeDescriptor] = []
        for index, segment in enumerate(segments):
            descriptor = self.parse_segment(segment, first=index == 0)
            if descriptor is not None:
                types.append(descriptor)
        return tuple(types)

    def check_brackets(self, text: str, offset: int = 0) -> None:
        depth = 0
        for index, ch in enumerate(text):
            if ch == "[":
                depth += 1
            elif ch == "]":
                depth -= 1
            if (ch == "-" and depth != 0) or depth < 0:
                raise self._error(
                    "Invalid use of brackets in type list", "misplaced_brackets", offset + index
                )
        if depth != 0:
            raise self._error("Unbalanced brackets in type list", "unbalanced_brackets")

    def _split_segments(self, text: str) -> list[Segment]:
        segments: list[Segment] = []
        start = 0
        while True:
            found = text.find(ARROW, start)
            if found < 0:
                segments.append(Segment(text[start:], self.types_offset + start))
                return segments
            segments.append(Segment(text[start:found], self.types_offset + start))
            start = found + len(ARROW)

    def parse_segment(self, segment: Segment, *, first: bool) -> Optional[TypeDescriptor]:
        """Return the segment's type, or ``None`` for the ``()`` placeholder."""

        text = segment.text
        if "".join(text.split()) == UNIT:
            if not first:
                raise self._error(
                    "'()' may only appear as the first type",
                    "malformed_type",
                    segment.offset + text.index("("),
                )
            return None

        index = 0
        length = len(text)

        def skip_space() -> None:
            nonlocal index
            while index < length and text[index].isspace():
                index += 1

        skip_space()
        opening = 0
        while index < length and text[index] == "[":
            opening += 1
            index += 1
            skip_space()

        start = index
        while index < length and (text[index].isalnum() or text[index] == "_"):
            index += 1
        identifier = text[start:index]
        if not identifier:
            raise self._error(
                "Expected a type name", "malformed_type", segment.offset + index
            )
        if identifier == WILDCARD:
            raise self._error(
                f"'{WILDCARD}' is reserved and cannot be written as a type",
                "malformed_type",
                segment.offset + start,
            )
        skip_space()

        closing = 0
        while index < length and text[index] == "]":
            closing += 1
            index += 1
            skip_space()

        if index != length:
            raise self._error(
                f"Unexpected {text[index]!r} in type {text.strip()!r}",
                "malformed_type",
                segment.offset + index,
            )
        if opening != closing:
            raise self._error(
                f"Unbalanced brackets in type {text.strip()!r}",
                "unbalanced_brackets",
                segment.offset,
            )
        return TypeDescriptor(identifier, opening)

    # ------------------------------------------------------------------
    # Constraints

    def parse_constraint_block(self, text: str) -> dict[str, tuple[str, ...]]:
        invalid = _CONSTRAINTS_ALLOWED.search(text)
        if invalid:
            raise self._error(
                f"Invalid character {invalid.group()!r} in class constraints",
                "invalid_characters",
                invalid.start(),
            )

        constraints: dict[str, list[str]] = {}
        for clause in text.split(","):
            tokens = clause.split()
            if len(tokens) != 2:
                raise self._error(
                    f"Malformed class constraint {clause.strip()!r}; expected 'Class variable'",
                    "malformed_constraint",
                )
            class_name, variable = tokens
            constraints.setdefault(variable, []).append(class_name)
        return {variable: tuple(classes) for variable, classes in constraints.items()}


def _warn_unused_constraints(
    signature: str,
    constraints: dict[str, tuple[str, ...]],
    types: tuple[TypeDescriptor, ...],
) -> None:
    variables = {typ.base_type for typ in types if typ.is_variable}
    for name, classes in constraints.items():
        if is_concrete(name):
            _LOGGER.warning(
                "constraint %s on concrete type %r in %r is never checked",
                "/".join(classes),
                name,
                signature,
            )
        elif name not in variables:
            _LOGGER.warning(
                "constraint %s on unused type variable %r in %r is never checked",
                "/".join(classes),
                name,
                signature,
            )
