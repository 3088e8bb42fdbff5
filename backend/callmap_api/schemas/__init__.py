"""Pydantic schemas module.

Response models for the API. Conversion from engine values lives with the
endpoints (callmap_api.api.v1.convert).

Naming convention:
- Schema suffix to distinguish from engine dataclasses
"""

from callmap_api.schemas.signature import (
    ChainIssueSchema,
    ChainValidationSchema,
    ChangedSignatureSchema,
    DeltaSchema,
    ParameterChangeSchema,
    ParameterSchema,
    SignatureBodySchema,
    SignatureSchema,
    TransitionSchema,
    VersionsSchema,
)

__all__ = [
    "ChainIssueSchema",
    "ChainValidationSchema",
    "ChangedSignatureSchema",
    "DeltaSchema",
    "ParameterChangeSchema",
    "ParameterSchema",
    "SignatureBodySchema",
    "SignatureSchema",
    "TransitionSchema",
    "VersionsSchema",
]
