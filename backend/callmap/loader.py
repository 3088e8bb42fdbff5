"""Read and write persisted call map files.

Layout of a call map directory:

    CallMap.json            baseline table at the newest supported version
    CallMap_84_delta.json   delta for the transition into 8.4
    CallMap_83_delta.json   delta for the transition into 8.3
    ...

Each delta file holds three partitions keyed by routine name:

    {
      "added":   {"name": {"0": "ret", "param": "type", "opt=": "type"}},
      "changed": {"name": {"old": {...}, "new": {...}}},
      "removed": {"name": {...}}
    }

The older side of each transition is the previous entry of the supported
version list, since file names only record the newer side.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError

from callmap.chain import DeltaChain
from callmap.delta import ChangedSignature, Delta
from callmap.errors import CallMapError, CallMapFileError
from callmap.signature import Signature, table_from_mappings
from callmap.version import Version, VersionTransition

logger = logging.getLogger(__name__)

BASELINE_FILE_NAME = "CallMap.json"
DELTA_FILE_RE = re.compile(r"^CallMap_(\d+)_delta\.json$")

SignatureDocument = dict[str, str]


class ChangedEntryDocument(BaseModel):
    """Persisted form of one ``changed`` entry."""

    model_config = ConfigDict(extra="forbid")

    old: SignatureDocument
    new: SignatureDocument


class DeltaDocument(BaseModel):
    """Persisted form of a delta file."""

    model_config = ConfigDict(extra="forbid")

    added: dict[str, SignatureDocument] = {}
    changed: dict[str, ChangedEntryDocument] = {}
    removed: dict[str, SignatureDocument] = {}


_baseline_adapter = TypeAdapter(dict[str, SignatureDocument])


@dataclass(frozen=True)
class CallMapData:
    """Everything needed to build a Resolver."""

    baseline: dict[str, Signature]
    baseline_version: Version
    chain: DeltaChain


# =============================================================================
# Reading
# =============================================================================


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise CallMapFileError(path, "file not found") from exc
    except json.JSONDecodeError as exc:
        raise CallMapFileError(path, f"invalid JSON: {exc}") from exc


def read_baseline(path: Path | str) -> dict[str, Signature]:
    """Load a baseline signature table.

    Raises:
        CallMapFileError: If the file is missing or malformed.
    """
    path = Path(path)
    try:
        raw = _baseline_adapter.validate_python(_read_json(path))
        table = table_from_mappings(raw)
    except ValidationError as exc:
        raise CallMapFileError(path, f"invalid baseline: {exc}") from exc
    except ValueError as exc:
        raise CallMapFileError(path, str(exc)) from exc
    logger.debug(f"Loaded {len(table)} baseline signatures from {path}")
    return table


def parse_delta(document: Any) -> Delta:
    """Build a Delta from an already-decoded delta document.

    Raises:
        ValidationError: If the document shape is wrong.
        ValueError: If a signature mapping is malformed.
        InvalidDelta: If the partitions overlap or a change is a no-op.
    """
    parsed = DeltaDocument.model_validate(document)
    return Delta(
        added=table_from_mappings(parsed.added),
        changed={
            name: ChangedSignature(
                old=Signature.from_mapping(entry.old),
                new=Signature.from_mapping(entry.new),
            )
            for name, entry in parsed.changed.items()
        },
        removed=table_from_mappings(parsed.removed),
    )


def read_delta(path: Path | str) -> Delta:
    """Load one delta file.

    Raises:
        CallMapFileError: If the file is missing, malformed, or breaks the
            delta invariants.
    """
    path = Path(path)
    try:
        return parse_delta(_read_json(path))
    except ValidationError as exc:
        raise CallMapFileError(path, f"invalid delta: {exc}") from exc
    except CallMapFileError:
        raise
    except (CallMapError, ValueError) as exc:
        raise CallMapFileError(path, str(exc)) from exc


def discover_delta_files(directory: Path | str) -> dict[Version, Path]:
    """Map each delta file's newer version to its path."""
    found: dict[Version, Path] = {}
    for path in sorted(Path(directory).glob("CallMap_*_delta.json")):
        match = DELTA_FILE_RE.match(path.name)
        if match:
            found[Version.from_compact(match.group(1))] = path
    return found


def load_chain(directory: Path | str, versions: Sequence[Version | str]) -> DeltaChain:
    """Load every delta file in ``directory`` into a DeltaChain.

    Args:
        directory: Directory holding ``CallMap_<NN>_delta.json`` files.
        versions: Supported versions, ascending. Each delta's older side is
            the version preceding its newer side in this list.

    Raises:
        CallMapFileError: If a delta file names a version outside the list,
            or the first supported version (which has no predecessor).
        NonContiguousTransition: If the delta files leave a gap.
    """
    ordered = sorted(Version.parse(v) for v in versions)
    pairs: list[tuple[VersionTransition, Delta]] = []

    for to_version, path in discover_delta_files(directory).items():
        if to_version not in ordered:
            raise CallMapFileError(path, f"version {to_version} is not supported")
        index = ordered.index(to_version)
        if index == 0:
            raise CallMapFileError(
                path, f"version {to_version} is the oldest supported version"
            )
        pairs.append((VersionTransition(ordered[index - 1], to_version), read_delta(path)))

    chain = DeltaChain.from_entries(pairs)
    logger.info(f"Loaded {len(chain)} delta files from {directory}")
    return chain


def load_callmap(
    directory: Path | str,
    versions: Sequence[Version | str],
    baseline_file: str = BASELINE_FILE_NAME,
) -> CallMapData:
    """Load the baseline (at the newest supported version) and its chain."""
    if not versions:
        raise ValueError("At least one supported version is required")
    directory = Path(directory)
    baseline_version = max(Version.parse(v) for v in versions)
    return CallMapData(
        baseline=read_baseline(directory / baseline_file),
        baseline_version=baseline_version,
        chain=load_chain(directory, versions),
    )


# =============================================================================
# Writing
# =============================================================================


def delta_to_document(delta: Delta) -> dict[str, Any]:
    """Serialize a Delta in the persisted shape, routines sorted by name."""

    def _mapping(signature: Signature) -> SignatureDocument:
        return {str(key): value for key, value in signature.to_mapping().items()}

    return {
        "added": {name: _mapping(delta.added[name]) for name in sorted(delta.added)},
        "changed": {
            name: {
                "old": _mapping(delta.changed[name].old),
                "new": _mapping(delta.changed[name].new),
            }
            for name in sorted(delta.changed)
        },
        "removed": {name: _mapping(delta.removed[name]) for name in sorted(delta.removed)},
    }


def delta_file_name(version: Version | str) -> str:
    """File name for the delta into ``version`` (8.4 -> CallMap_84_delta.json)."""
    return f"CallMap_{Version.parse(version).compact}_delta.json"


def write_delta_file(delta: Delta, path: Path | str) -> Path:
    """Write a delta file, creating parent directories as needed."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        json.dumps(delta_to_document(delta), indent=4) + "\n", encoding="utf-8"
    )
    logger.info(
        f"Wrote delta to {path}: +{len(delta.added)} ~{len(delta.changed)} "
        f"-{len(delta.removed)}"
    )
    return path
