"""Conversion from engine values to response schemas."""

from callmap.chain import ChainEntry
from callmap.signature import Signature
from callmap.validator import ChainValidationResult
from callmap.version import VersionTransition
from callmap_api.schemas.signature import (
    ChainIssueSchema,
    ChainValidationSchema,
    ChangedSignatureSchema,
    DeltaSchema,
    ParameterChangeSchema,
    ParameterSchema,
    SignatureBodySchema,
    TransitionSchema,
)


def signature_body(signature: Signature) -> SignatureBodySchema:
    return SignatureBodySchema(
        return_type=signature.return_type,
        parameters=[
            ParameterSchema(name=p.name, type=p.type, optional=p.optional)
            for p in signature.parameters
        ],
    )


def transition_schema(transition: VersionTransition) -> TransitionSchema:
    return TransitionSchema(
        from_version=str(transition.from_version),
        to_version=str(transition.to_version),
    )


def delta_schema(entry: ChainEntry) -> DeltaSchema:
    delta = entry.delta
    return DeltaSchema(
        transition=transition_schema(entry.transition),
        added={name: signature_body(sig) for name, sig in sorted(delta.added.items())},
        changed={
            name: ChangedSignatureSchema(
                old=signature_body(change.old),
                new=signature_body(change.new),
                parameter_changes=[
                    ParameterChangeSchema(
                        kind=c.kind.value, name=c.name, old=c.old, new=c.new
                    )
                    for c in change.parameter_changes
                ],
            )
            for name, change in sorted(delta.changed.items())
        },
        removed={name: signature_body(sig) for name, sig in sorted(delta.removed.items())},
    )


def validation_schema(result: ChainValidationResult) -> ChainValidationSchema:
    return ChainValidationSchema(
        is_consistent=result.is_consistent,
        transitions_checked=result.transitions_checked,
        routines_checked=result.routines_checked,
        issues=[
            ChainIssueSchema(
                transition=str(issue.transition),
                routine=issue.routine,
                previous_transition=str(issue.previous_transition),
            )
            for issue in result.issues
        ],
    )
