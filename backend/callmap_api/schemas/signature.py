"""Pydantic schemas for signature, delta, and chain endpoints."""

from pydantic import BaseModel, Field


class ParameterSchema(BaseModel):
    """One positional parameter."""

    name: str
    type: str
    optional: bool = False


class SignatureBodySchema(BaseModel):
    """Return type and ordered parameters of a routine."""

    return_type: str
    parameters: list[ParameterSchema] = Field(default_factory=list)


class SignatureSchema(SignatureBodySchema):
    """A routine's signature resolved at one version."""

    routine: str
    version: str


class TransitionSchema(BaseModel):
    """An adjacency edge between two supported versions."""

    from_version: str
    to_version: str


class VersionsSchema(BaseModel):
    """Versions the loaded call map can resolve."""

    baseline_version: str
    versions: list[str]
    transitions: list[TransitionSchema] = Field(default_factory=list)


class ParameterChangeSchema(BaseModel):
    """One parameter-level edit inside a changed signature."""

    kind: str
    name: str | None
    old: str | None
    new: str | None


class ChangedSignatureSchema(BaseModel):
    """Before/after signatures of a changed routine."""

    old: SignatureBodySchema
    new: SignatureBodySchema
    parameter_changes: list[ParameterChangeSchema] = Field(default_factory=list)


class DeltaSchema(BaseModel):
    """The delta recorded for one transition."""

    transition: TransitionSchema
    added: dict[str, SignatureBodySchema] = Field(default_factory=dict)
    changed: dict[str, ChangedSignatureSchema] = Field(default_factory=dict)
    removed: dict[str, SignatureBodySchema] = Field(default_factory=dict)


class ChainIssueSchema(BaseModel):
    """A routine whose state disagrees between two transitions."""

    transition: str
    routine: str
    previous_transition: str


class ChainValidationSchema(BaseModel):
    """Validator report for the loaded delta chain."""

    is_consistent: bool
    transitions_checked: int
    routines_checked: int
    issues: list[ChainIssueSchema] = Field(default_factory=list)
