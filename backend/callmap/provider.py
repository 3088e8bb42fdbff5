"""Analyzer-facing signature lookups with per-version caching.

The resolver is pure and never caches; this provider is the consumer that
keeps one resolved table per requested version and answers single-routine
lookups. Routine names are matched case-insensitively, the way built-in
function names are.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from types import MappingProxyType

from callmap.loader import BASELINE_FILE_NAME, load_callmap
from callmap.resolver import Resolver
from callmap.signature import Signature, SignatureTable
from callmap.version import Version

logger = logging.getLogger(__name__)


class SignatureProvider:
    """Caches resolved signature tables keyed by version."""

    def __init__(self, resolver: Resolver) -> None:
        self.resolver = resolver
        self._lock = threading.Lock()
        # version -> (read-only table, lowercased name -> stored name)
        self._entries: dict[Version, tuple[SignatureTable, dict[str, str]]] = {}

    @classmethod
    def from_directory(
        cls,
        directory: Path | str,
        versions: list[str],
        baseline_file: str = BASELINE_FILE_NAME,
    ) -> SignatureProvider:
        """Load a call map directory and validate its chain.

        Raises:
            CallMapFileError: If a file is missing or malformed.
            InconsistentChain: If the delta chain contradicts itself.
        """
        data = load_callmap(directory, versions, baseline_file)
        return cls(Resolver(data.baseline, data.baseline_version, data.chain))

    @property
    def baseline_version(self) -> Version:
        return self.resolver.baseline_version

    @property
    def versions(self) -> tuple[Version, ...]:
        return self.resolver.versions

    def _entry(self, version: Version) -> tuple[SignatureTable, dict[str, str]]:
        with self._lock:
            entry = self._entries.get(version)
            if entry is None:
                table = self.resolver.resolve(version)
                entry = (MappingProxyType(table), {name.lower(): name for name in table})
                self._entries[version] = entry
                logger.info(f"Resolved signature table for {version}: {len(table)} routines")
        return entry

    def table_for(self, version: Version | str) -> SignatureTable:
        """Return the read-only resolved table at ``version``, resolving on first use.

        Raises:
            UnknownVersion, UnsupportedFutureVersion, RoutineStateConflict:
                As raised by the resolver.
        """
        table, _ = self._entry(Version.parse(version))
        return table

    def find(self, routine: str, version: Version | str) -> tuple[str, Signature] | None:
        """Look up one routine at ``version``, ignoring case.

        Returns:
            The routine's name as stored in the table and its signature, or
            None if the routine does not exist at ``version``.
        """
        table, index = self._entry(Version.parse(version))
        name = routine if routine in table else index.get(routine.lower())
        if name is None:
            return None
        return name, table[name]

    def get_signature(self, routine: str, version: Version | str) -> Signature | None:
        """Look up one routine at ``version``; None if it does not exist there."""
        found = self.find(routine, version)
        return found[1] if found is not None else None

    def has_routine(self, routine: str, version: Version | str) -> bool:
        return self.get_signature(routine, version) is not None

    def clear(self) -> None:
        """Drop every cached table."""
        with self._lock:
            self._entries.clear()
