"""Delta and chain validation endpoints."""

from fastapi import APIRouter, Depends, HTTPException

from callmap.chain import DeltaChain
from callmap.validator import validate
from callmap_api.api.v1.convert import delta_schema, validation_schema
from callmap_api.api.v1.deps import get_chain, parse_version
from callmap_api.schemas.signature import ChainValidationSchema, DeltaSchema

router = APIRouter()


@router.get("/deltas/{from_version}/{to_version}")
async def get_deltas(
    from_version: str,
    to_version: str,
    chain: DeltaChain = Depends(get_chain),
) -> list[DeltaSchema]:
    """Get the deltas recorded between two chain boundaries, oldest first."""
    older = parse_version(from_version)
    newer = parse_version(to_version)
    try:
        entries = chain.entries_between(older, newer)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return [delta_schema(entry) for entry in entries]


@router.get("/chain/validation")
async def get_chain_validation(
    chain: DeltaChain = Depends(get_chain),
) -> ChainValidationSchema:
    """Run the consistency validator over the stored delta chain."""
    return validation_schema(validate(chain))
