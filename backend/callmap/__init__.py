"""Versioned built-in signature maps: delta diffing and resolution."""

from callmap.chain import ChainEntry, DeltaChain
from callmap.delta import ChangedSignature, Delta, diff
from callmap.errors import (
    CallMapError,
    CallMapFileError,
    DuplicateTransition,
    InconsistentChain,
    InvalidDelta,
    NonContiguousTransition,
    RoutineStateConflict,
    UnknownVersion,
    UnsupportedFutureVersion,
)
from callmap.resolver import Resolver, resolve
from callmap.signature import ParameterKey, Signature, SignatureTable
from callmap.validator import ChainValidationResult, validate
from callmap.version import Version, VersionTransition

__all__ = [
    "CallMapError",
    "CallMapFileError",
    "ChainEntry",
    "ChainValidationResult",
    "ChangedSignature",
    "Delta",
    "DeltaChain",
    "DuplicateTransition",
    "InconsistentChain",
    "InvalidDelta",
    "NonContiguousTransition",
    "ParameterKey",
    "Resolver",
    "RoutineStateConflict",
    "Signature",
    "SignatureTable",
    "UnknownVersion",
    "UnsupportedFutureVersion",
    "Version",
    "VersionTransition",
    "diff",
    "resolve",
    "validate",
]
