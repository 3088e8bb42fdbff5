"""Ordered chain of per-transition deltas.

A chain is an ascending, gap-free sequence of (VersionTransition, Delta)
pairs: each transition starts at the version the previous one ends at.
Chains are immutable; append() returns a new chain.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from callmap.delta import Delta
from callmap.errors import DuplicateTransition, NonContiguousTransition, UnknownVersion
from callmap.version import Version, VersionTransition


@dataclass(frozen=True)
class ChainEntry:
    """One link of the chain."""

    transition: VersionTransition
    delta: Delta


@dataclass(frozen=True)
class DeltaChain:
    """Gap-free ascending sequence of per-transition deltas.

    Every construction path checks the entries, so a chain with a gap, a
    descending step, or a repeated transition cannot exist.

    Raises:
        DuplicateTransition: If a transition appears twice.
        NonContiguousTransition: If an entry does not start where the
            previous one ends.
    """

    entries: tuple[ChainEntry, ...] = ()

    def __post_init__(self) -> None:
        seen: set[VersionTransition] = set()
        previous: VersionTransition | None = None
        for entry in self.entries:
            transition = entry.transition
            if transition in seen:
                raise DuplicateTransition(transition)
            if previous is not None and transition.from_version != previous.to_version:
                raise NonContiguousTransition(transition, previous.to_version)
            seen.add(transition)
            previous = transition

    @classmethod
    def from_entries(
        cls, pairs: Iterable[tuple[VersionTransition, Delta]]
    ) -> DeltaChain:
        """Build a chain from unordered (transition, delta) pairs.

        Pairs are sorted by version and appended one by one, so the same
        contiguity and duplicate checks as append() apply.
        """
        chain = cls()
        for transition, delta in sorted(
            pairs, key=lambda pair: (pair[0].from_version, pair[0].to_version)
        ):
            chain = chain.append(transition, delta)
        return chain

    def append(self, transition: VersionTransition, delta: Delta) -> DeltaChain:
        """Return a new chain with ``transition`` added at the newer end.

        Raises:
            DuplicateTransition: If the transition is already in the chain.
            NonContiguousTransition: If it does not start where the chain ends.
        """
        return DeltaChain(entries=(*self.entries, ChainEntry(transition, delta)))

    # =========================================================================
    # Queries
    # =========================================================================

    @property
    def transitions(self) -> tuple[VersionTransition, ...]:
        return tuple(entry.transition for entry in self.entries)

    @property
    def boundaries(self) -> tuple[Version, ...]:
        """Every version the chain reaches, oldest first."""
        if not self.entries:
            return ()
        first = self.entries[0].transition.from_version
        return (first, *(entry.transition.to_version for entry in self.entries))

    @property
    def oldest_version(self) -> Version | None:
        return self.entries[0].transition.from_version if self.entries else None

    @property
    def newest_version(self) -> Version | None:
        return self.entries[-1].transition.to_version if self.entries else None

    def delta_for(self, transition: VersionTransition) -> Delta | None:
        for entry in self.entries:
            if entry.transition == transition:
                return entry.delta
        return None

    def entries_between(
        self, from_version: Version, to_version: Version
    ) -> tuple[ChainEntry, ...]:
        """Chain entries spanning ``from_version`` up to ``to_version``, ascending.

        Raises:
            UnknownVersion: If either endpoint is not a chain boundary.
            ValueError: If ``from_version`` is newer than ``to_version``.
        """
        boundaries = self.boundaries
        for version in (from_version, to_version):
            if version not in boundaries:
                raise UnknownVersion(version)
        if to_version < from_version:
            raise ValueError(
                f"Cannot span backwards from {from_version} to {to_version}"
            )
        start = boundaries.index(from_version)
        end = boundaries.index(to_version)
        return self.entries[start:end]

    def deltas_between(
        self, from_version: Version, to_version: Version
    ) -> tuple[Delta, ...]:
        """Deltas spanning ``from_version`` up to ``to_version``, ascending."""
        return tuple(
            entry.delta for entry in self.entries_between(from_version, to_version)
        )

    def __iter__(self) -> Iterator[ChainEntry]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)
