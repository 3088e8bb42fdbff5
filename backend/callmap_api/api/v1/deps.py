"""Shared endpoint dependencies and error translation."""

import logging
from functools import lru_cache

from fastapi import HTTPException

from callmap.chain import DeltaChain
from callmap.errors import (
    CallMapError,
    CallMapFileError,
    InconsistentChain,
    RoutineStateConflict,
    UnknownVersion,
    UnsupportedFutureVersion,
)
from callmap.loader import load_chain
from callmap.provider import SignatureProvider
from callmap.version import Version
from callmap_api.config import settings

logger = logging.getLogger(__name__)


@lru_cache
def get_provider() -> SignatureProvider:
    """Load and validate the configured call map once per process."""
    logger.info(f"Loading call map from {settings.callmap_dir}")
    return SignatureProvider.from_directory(
        settings.callmap_dir,
        settings.supported_versions,
        settings.callmap_baseline_file,
    )


@lru_cache
def get_chain() -> DeltaChain:
    """Load the configured delta chain without validating it."""
    return load_chain(settings.callmap_dir, settings.supported_versions)


def parse_version(value: str) -> Version:
    """Parse a version path parameter, rejecting malformed values with 422."""
    try:
        return Version.parse(value)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


def to_http_exception(exc: CallMapError) -> HTTPException:
    """Map an engine failure to the HTTP status a client should see."""
    if isinstance(exc, UnknownVersion):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, UnsupportedFutureVersion):
        return HTTPException(status_code=422, detail=str(exc))
    if isinstance(exc, (RoutineStateConflict, InconsistentChain)):
        logger.error(f"Call map data is inconsistent: {exc}")
        return HTTPException(status_code=409, detail=str(exc))
    if isinstance(exc, CallMapFileError):
        logger.error(f"Call map data unavailable: {exc}")
        return HTTPException(status_code=503, detail=str(exc))
    logger.error(f"Call map failure: {exc}")
    return HTTPException(status_code=500, detail=str(exc))
