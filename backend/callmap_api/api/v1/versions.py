"""Version listing endpoint."""

from fastapi import APIRouter, Depends

from callmap.provider import SignatureProvider
from callmap_api.api.v1.convert import transition_schema
from callmap_api.api.v1.deps import get_provider
from callmap_api.schemas.signature import VersionsSchema

router = APIRouter()


@router.get("")
async def list_versions(
    provider: SignatureProvider = Depends(get_provider),
) -> VersionsSchema:
    """List the baseline version and every version the chain reaches."""
    return VersionsSchema(
        baseline_version=str(provider.baseline_version),
        versions=[str(v) for v in provider.versions],
        transitions=[transition_schema(t) for t in provider.resolver.chain.transitions],
    )
