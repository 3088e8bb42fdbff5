"""Runtime versions and the transitions between adjacent versions.

Versions are dotted numeric identifiers ("8.3", "8.4", "8.10") compared
component by component, so "8.10" sorts after "8.9".
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import total_ordering

_VERSION_RE = re.compile(r"^\d+(\.\d+)*$")


@total_ordering
@dataclass(frozen=True)
class Version:
    """A totally ordered runtime version.

    Attributes:
        parts: Numeric components, e.g. (8, 4) for "8.4".
    """

    parts: tuple[int, ...]

    @classmethod
    def parse(cls, value: Version | str) -> Version:
        """Parse a dotted version string.

        Args:
            value: e.g., "8.4" or "7.0.1". A Version is returned unchanged.

        Returns:
            The parsed Version.

        Raises:
            ValueError: If the string is not a dotted numeric version.
        """
        if isinstance(value, Version):
            return value
        text = value.strip()
        if not _VERSION_RE.match(text):
            raise ValueError(
                f"Invalid version: {value!r}. Expected dotted numbers (e.g., '8.4')"
            )
        return cls(tuple(int(part) for part in text.split(".")))

    @classmethod
    def from_id(cls, version_id: int) -> Version:
        """Build a version from a packed id (80400 -> 8.4, 70103 -> 7.1.3)."""
        if version_id < 10000:
            raise ValueError(f"Invalid version id: {version_id}")
        major, rest = divmod(version_id, 10000)
        minor, patch = divmod(rest, 100)
        if patch:
            return cls((major, minor, patch))
        return cls((major, minor))

    @classmethod
    def from_compact(cls, digits: str) -> Version:
        """Parse the compact form used in delta file names ("84" -> 8.4).

        The first digit is the major version; the remainder is the minor.
        """
        if not digits.isdigit() or len(digits) < 2:
            raise ValueError(f"Invalid compact version: {digits!r}")
        return cls((int(digits[0]), int(digits[1:])))

    @property
    def compact(self) -> str:
        """Compact major/minor form, the inverse of from_compact.

        Raises:
            ValueError: If the major version has more than one digit, which
                the compact form cannot represent unambiguously.
        """
        if self.parts[0] > 9:
            raise ValueError(f"Version {self} has no compact form")
        minor = self.parts[1] if len(self.parts) > 1 else 0
        return f"{self.parts[0]}{minor}"

    def _key(self) -> tuple[int, ...]:
        # Trailing zeros are insignificant: 8.4 == 8.4.0
        parts = list(self.parts)
        while len(parts) > 1 and parts[-1] == 0:
            parts.pop()
        return tuple(parts)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: Version) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __str__(self) -> str:
        return ".".join(str(part) for part in self.parts)


@dataclass(frozen=True)
class VersionTransition:
    """An adjacency edge between two consecutive supported versions."""

    from_version: Version
    to_version: Version

    def __post_init__(self) -> None:
        if not self.from_version < self.to_version:
            raise ValueError(
                f"Transition must go from an older to a newer version: "
                f"{self.from_version} -> {self.to_version}"
            )

    @classmethod
    def of(cls, from_version: Version | str, to_version: Version | str) -> VersionTransition:
        """Build a transition from version strings or Versions."""
        return cls(Version.parse(from_version), Version.parse(to_version))

    def __str__(self) -> str:
        return f"{self.from_version} -> {self.to_version}"
