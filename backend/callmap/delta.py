"""Version-to-version diff engine for signature tables.

Compares two signature tables and classifies every routine as ADDED,
CHANGED, REMOVED, or UNCHANGED. Unchanged routines never appear in the
resulting Delta: a delta is the smallest record that reproduces the newer
table from the older one.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from callmap.errors import InvalidDelta
from callmap.signature import (
    ParameterChange,
    Signature,
    SignatureTable,
    compare_signatures,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChangedSignature:
    """A routine that exists on both sides of a transition with different signatures."""

    old: Signature
    new: Signature

    @property
    def parameter_changes(self) -> list[ParameterChange]:
        """Parameter-level edits from ``old`` to ``new``."""
        return compare_signatures(self.old, self.new)


@dataclass(frozen=True, eq=False)
class Delta:
    """Structural difference between two adjacent versions' signature tables.

    Attributes:
        added: Routines that exist only in the newer version.
        changed: Routines whose signature differs between the versions.
        removed: Routines that exist only in the older version.

    The partitions are disjoint and every ``changed`` entry is a real change;
    constructing a Delta that breaks either rule raises InvalidDelta.
    """

    added: Mapping[str, Signature] = field(default_factory=dict)
    changed: Mapping[str, ChangedSignature] = field(default_factory=dict)
    removed: Mapping[str, Signature] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Freeze the partitions so a Delta can be shared between callers
        object.__setattr__(self, "added", MappingProxyType(dict(self.added)))
        object.__setattr__(self, "changed", MappingProxyType(dict(self.changed)))
        object.__setattr__(self, "removed", MappingProxyType(dict(self.removed)))

        for name in self.added.keys() & self.changed.keys():
            raise InvalidDelta(name, "listed as both added and changed")
        for name in self.added.keys() & self.removed.keys():
            raise InvalidDelta(name, "listed as both added and removed")
        for name in self.changed.keys() & self.removed.keys():
            raise InvalidDelta(name, "listed as both changed and removed")
        for name, entry in self.changed.items():
            if entry.old == entry.new:
                raise InvalidDelta(name, "changed entry has identical old and new signatures")

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.changed or self.removed)

    @property
    def routines(self) -> set[str]:
        """Every routine name the delta mentions."""
        return set(self.added) | set(self.changed) | set(self.removed)

    def older_state(self, routine: str) -> Signature | None:
        """Signature this delta asserts on its older side (None = absent)."""
        if routine in self.changed:
            return self.changed[routine].old
        if routine in self.removed:
            return self.removed[routine]
        return None

    def newer_state(self, routine: str) -> Signature | None:
        """Signature this delta asserts on its newer side (None = absent)."""
        if routine in self.changed:
            return self.changed[routine].new
        if routine in self.added:
            return self.added[routine]
        return None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Delta):
            return NotImplemented
        return (
            dict(self.added) == dict(other.added)
            and dict(self.changed) == dict(other.changed)
            and dict(self.removed) == dict(other.removed)
        )


@dataclass
class DeltaSummary:
    """Counts describing one diff run."""

    routines_added: int = 0
    routines_changed: int = 0
    routines_removed: int = 0
    routines_unchanged: int = 0

    def __str__(self) -> str:
        return (
            f"+{self.routines_added} ~{self.routines_changed} "
            f"-{self.routines_removed} ={self.routines_unchanged}"
        )


def diff(older: SignatureTable, newer: SignatureTable) -> Delta:
    """Compute the Delta that turns ``older`` into ``newer``.

    Pure function over its inputs; diffing never fails.

    Args:
        older: Signature table at the earlier version.
        newer: Signature table at the later version.

    Returns:
        Delta with added/changed/removed partitions, each sorted by routine name.
    """
    delta, summary = diff_with_summary(older, newer)
    logger.debug(f"Diffed signature tables: {summary}")
    return delta


def diff_with_summary(
    older: SignatureTable, newer: SignatureTable
) -> tuple[Delta, DeltaSummary]:
    """Same as diff(), also returning per-category counts."""
    summary = DeltaSummary()
    added: dict[str, Signature] = {}
    changed: dict[str, ChangedSignature] = {}
    removed: dict[str, Signature] = {}

    for name in sorted(newer):
        after = newer[name]
        before = older.get(name)
        if before is None:
            added[name] = after
            summary.routines_added += 1
        elif before != after:
            changed[name] = ChangedSignature(old=before, new=after)
            summary.routines_changed += 1
        else:
            summary.routines_unchanged += 1

    for name in sorted(older):
        if name not in newer:
            removed[name] = older[name]
            summary.routines_removed += 1

    return Delta(added=added, changed=changed, removed=removed), summary
