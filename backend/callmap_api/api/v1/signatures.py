"""Signature lookup endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from callmap.provider import SignatureProvider
from callmap_api.api.v1.convert import signature_body
from callmap_api.api.v1.deps import get_provider, parse_version
from callmap_api.schemas.signature import SignatureSchema

router = APIRouter()


@router.get("/{version}/{routine}")
async def get_signature(
    version: str,
    routine: str,
    provider: SignatureProvider = Depends(get_provider),
) -> SignatureSchema:
    """Get one routine's signature as it existed at ``version``."""
    target = parse_version(version)
    found = provider.find(routine, target)
    if found is None:
        raise HTTPException(
            status_code=404, detail=f"Routine {routine} does not exist at {target}"
        )
    name, signature = found
    body = signature_body(signature)
    return SignatureSchema(
        routine=name,
        version=str(target),
        return_type=body.return_type,
        parameters=body.parameters,
    )
