"""Runtime contract checking with type variables and type classes.

>>> from signet import TypeClassEnv, sign
>>> env = TypeClassEnv({"Positive": lambda x: x > 0})
>>> double = sign(env, "Positive a => a -> a", lambda x: x * 2)
>>> double(4)
8
"""

from signet.dsl import Signature, TypeDescriptor, parse_signature
from signet.errors import (
    ArityMismatchError,
    ContractViolation,
    DepthMismatchError,
    DuplicateTypeClassError,
    HeterogeneousArrayError,
    InconsistentTypeVariableError,
    InvalidTypeClassError,
    SignatureSyntaxError,
    SignetError,
    TypeClassError,
    TypeMismatchError,
    UnknownTypeClassError,
    UnmetConstraintError,
    ViolationKind,
)
from signet.utils.config import SignetConfig
from signet.verifier import TypeClassEnv, check_signature, infer, make_signer, sign

__version__ = "0.1.0"

__all__ = [
    "ArityMismatchError",
    "ContractViolation",
    "DepthMismatchError",
    "DuplicateTypeClassError",
    "HeterogeneousArrayError",
    "InconsistentTypeVariableError",
    "InvalidTypeClassError",
    "Signature",
    "SignatureSyntaxError",
    "SignetConfig",
    "SignetError",
    "TypeClassEnv",
    "TypeClassError",
    "TypeDescriptor",
    "TypeMismatchError",
    "UnknownTypeClassError",
    "UnmetConstraintError",
    "ViolationKind",
    "check_signature",
    "infer",
    "make_signer",
    "parse_signature",
    "sign",
]
