"""Resolve the effective signature table for a target version.

The baseline table describes the newest version the chain reaches. Older
versions are derived by walking the chain backward and applying the inverse
of each delta. Every inverse step checks that the working table matches what
the delta asserts about the newer side, so a corrupted chain fails loudly
instead of drifting into wrong signatures.
"""

from __future__ import annotations

import logging
import time

from callmap.chain import ChainEntry, DeltaChain
from callmap.errors import RoutineStateConflict, UnknownVersion, UnsupportedFutureVersion
from callmap.signature import Signature, SignatureTable
from callmap.validator import ensure_consistent
from callmap.version import Version

logger = logging.getLogger(__name__)


def resolve(
    baseline: SignatureTable,
    baseline_version: Version | str,
    chain: DeltaChain,
    target: Version | str,
) -> dict[str, Signature]:
    """Produce the signature table in effect at ``target``.

    Args:
        baseline: Signature table at ``baseline_version``.
        baseline_version: The newest version, where the chain ends.
        chain: Delta chain ending at ``baseline_version``.
        target: Version to resolve.

    Returns:
        A fresh table; inputs are never mutated.

    Raises:
        UnsupportedFutureVersion: If ``target`` is newer than the baseline.
        UnknownVersion: If ``target`` is not a chain boundary, or the chain
            does not end at ``baseline_version``.
        RoutineStateConflict: If a delta disagrees with the working table.
    """
    baseline_version = Version.parse(baseline_version)
    target = Version.parse(target)

    if target > baseline_version:
        raise UnsupportedFutureVersion(target, baseline_version)
    if target == baseline_version:
        return dict(baseline)

    if not chain.entries:
        raise UnknownVersion(target, "the delta chain is empty")
    _check_chain_head(chain, baseline_version)

    start = time.monotonic()
    working = dict(baseline)
    # Strictly descending: newest transition first
    for entry in reversed(chain.entries_between(target, baseline_version)):
        apply_inverse(working, entry)

    logger.debug(
        f"Resolved {len(working)} routines at {target} from baseline "
        f"{baseline_version} ({time.monotonic() - start:.3f}s)"
    )
    return working


def apply_inverse(working: dict[str, Signature], entry: ChainEntry) -> None:
    """Step ``working`` from the newer side of ``entry`` to its older side.

    Operates on the resolver's private working copy.

    Raises:
        RoutineStateConflict: If the working table does not match the
            state the delta asserts for its newer side.
    """
    transition = entry.transition
    delta = entry.delta

    for name, signature in delta.added.items():
        current = working.get(name)
        if current != signature:
            raise RoutineStateConflict(name, transition, signature, current)
        del working[name]

    for name, change in delta.changed.items():
        current = working.get(name)
        if current != change.new:
            raise RoutineStateConflict(name, transition, change.new, current)
        working[name] = change.old

    for name, signature in delta.removed.items():
        current = working.get(name)
        if current is not None:
            raise RoutineStateConflict(name, transition, None, current)
        working[name] = signature


def _check_chain_head(chain: DeltaChain, baseline_version: Version) -> None:
    if chain.newest_version != baseline_version:
        raise UnknownVersion(
            baseline_version,
            f"the delta chain ends at {chain.newest_version}, not at the baseline",
        )


class Resolver:
    """Binds a baseline table and its delta chain for repeated resolution.

    The chain is validated once at construction, so a Resolver only exists
    for chains that compose without contradiction.
    """

    def __init__(
        self,
        baseline: SignatureTable,
        baseline_version: Version | str,
        chain: DeltaChain,
    ) -> None:
        self.baseline_version = Version.parse(baseline_version)
        if chain.entries:
            _check_chain_head(chain, self.baseline_version)
        ensure_consistent(chain)
        self.baseline = dict(baseline)
        self.chain = chain

    @property
    def versions(self) -> tuple[Version, ...]:
        """Every version this resolver can produce a table for."""
        return self.chain.boundaries or (self.baseline_version,)

    def resolve(self, target: Version | str) -> dict[str, Signature]:
        """Resolve the table at ``target``; see the module-level resolve()."""
        return resolve(self.baseline, self.baseline_version, self.chain, target)
