"""Public entry points for signet runtime checking."""

from signet.verifier.checker import Bindings, check_signature, check_values
from signet.verifier.inference import compare_types, infer
from signet.verifier.signer import make_signer, sign
from signet.verifier.typeclasses import TypeClassEnv, shape_predicate

__all__ = [
    "Bindings",
    "TypeClassEnv",
    "check_signature",
    "check_values",
    "compare_types",
    "infer",
    "make_signer",
    "shape_predicate",
    "sign",
]
