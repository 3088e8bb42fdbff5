"""API v1 router combining all endpoint routers."""

from fastapi import APIRouter

from callmap_api.api.v1 import deltas, signatures, versions

api_router = APIRouter()

api_router.include_router(versions.router, prefix="/versions", tags=["versions"])
api_router.include_router(signatures.router, prefix="/signatures", tags=["signatures"])
api_router.include_router(deltas.router, tags=["deltas"])
