"""Signature language: data model, parser and serializer."""

from .grammar import parse_signature, parse_type
from .types import CONCRETE_TYPES, WILDCARD, Signature, TypeDescriptor

__all__ = [
    "CONCRETE_TYPES",
    "Signature",
    "TypeDescriptor",
    "WILDCARD",
    "parse_signature",
    "parse_type",
]
