"""Canonical text and JSON forms of parsed signatures.

``format_signature`` renders a :class:`Signature` back into signature syntax
with normalised spacing, so ``"Num a,Ord a=>[a]->a"`` and
``"Num a, Ord a => [a] -> a"`` share one canonical form.  The JSON form is
deterministic (sorted constraint keys, stable separators) and carries a short
content hash that :func:`from_json` verifies.
"""

from __future__ import annotations

import hashlib
import json
from collections import OrderedDict
from typing import Any

from .grammar import parse_type
from .types import Signature, TypeDescriptor

__all__ = ["format_signature", "format_type", "from_json", "to_json"]


def format_type(descriptor: TypeDescriptor) -> str:
    return str(descriptor)


def format_signature(signature: Signature) -> str:
    """Render ``signature`` in canonical signature syntax."""

    types = [format_type(typ) for typ in signature.types]
    if not signature.parameters:
        types.insert(0, "()")
    body = " -> ".join(types)
    clauses = [
        f"{class_name} {variable}"
        for variable, classes in signature.constraints.items()
        for class_name in classes
    ]
    if not clauses:
        return body
    return f"{', '.join(clauses)} => {body}"


def to_json(signature: Signature) -> str:
    """Serialize ``signature`` into canonical JSON."""

    payload: OrderedDict[str, Any] = OrderedDict()
    payload["constraints"] = OrderedDict(
        (variable, list(signature.constraints[variable]))
        for variable in sorted(signature.constraints)
    )
    payload["types"] = [format_type(typ) for typ in signature.types]
    payload["id"] = _hash_payload(payload)
    return json.dumps(payload, indent=2, separators=(",", ": "))


def from_json(payload: str) -> Signature:
    """Rebuild a :class:`Signature`, rejecting payloads whose hash is stale."""

    raw = json.loads(payload)
    if not isinstance(raw, dict):
        raise ValueError("signature payload must be a JSON object")
    try:
        expected_id = raw.pop("id")
        constraints = raw["constraints"]
        types = raw["types"]
    except KeyError as exc:
        raise ValueError(f"signature payload is missing {exc.args[0]!r}") from exc
    if _hash_payload(raw) != expected_id:
        raise ValueError("signature payload hash mismatch")
    signature = Signature(
        types=tuple(parse_type(text) for text in types),
        constraints={variable: tuple(classes) for variable, classes in constraints.items()},
    )
    # Signatures compare without their source text, so rendering it here is safe.
    return Signature(signature.types, signature.constraints, format_signature(signature))


def _hash_payload(payload: Any) -> str:
    encoded = json.dumps(payload, sort_keys=True, separators=(",", ":")).encode("utf-8")
    return hashlib.sha256(encoded).hexdigest()[:16]
