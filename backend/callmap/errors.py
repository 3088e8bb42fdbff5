"""Typed failures raised by the call map delta engine.

Every error is a structural fault over immutable data, so none of them is
retried. Each carries the routine, transition, or version needed to locate
the bad record.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from callmap.signature import Signature
    from callmap.validator import InconsistentChainIssue
    from callmap.version import Version, VersionTransition


class CallMapError(Exception):
    """Base class for all call map engine failures."""


class InvalidDelta(CallMapError):
    """A delta breaks the partition or non-empty-change invariants."""

    def __init__(self, routine: str, reason: str) -> None:
        self.routine = routine
        self.reason = reason
        super().__init__(f"Invalid delta entry for {routine!r}: {reason}")


class NonContiguousTransition(CallMapError):
    """A transition does not start where the chain currently ends."""

    def __init__(self, transition: VersionTransition, expected_from: Version) -> None:
        self.transition = transition
        self.expected_from = expected_from
        super().__init__(
            f"Transition {transition} does not continue the chain "
            f"(expected it to start at {expected_from})"
        )


class DuplicateTransition(CallMapError):
    """The transition is already present in the chain."""

    def __init__(self, transition: VersionTransition) -> None:
        self.transition = transition
        super().__init__(f"Transition {transition} is already in the chain")


class UnknownVersion(CallMapError):
    """A version is not a transition boundary of the chain."""

    def __init__(self, version: Version, reason: str = "") -> None:
        self.version = version
        message = f"Version {version} is not a boundary of the delta chain"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class UnsupportedFutureVersion(CallMapError):
    """The requested version is newer than the baseline."""

    def __init__(self, version: Version, baseline_version: Version) -> None:
        self.version = version
        self.baseline_version = baseline_version
        super().__init__(
            f"Version {version} is newer than the baseline version {baseline_version}"
        )


class RoutineStateConflict(CallMapError):
    """The working table disagrees with what a delta asserts about a routine.

    ``expected`` is the state the delta's newer side asserts and ``actual``
    the state found in the working table; None means "routine absent".
    """

    def __init__(
        self,
        routine: str,
        transition: VersionTransition,
        expected: Signature | None,
        actual: Signature | None,
    ) -> None:
        self.routine = routine
        self.transition = transition
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Routine {routine!r} conflicts with delta {transition}: "
            f"expected {_describe(expected)}, found {_describe(actual)}"
        )


class InconsistentChain(CallMapError):
    """Two transitions disagree about a routine's state at a shared version."""

    def __init__(self, issues: list[InconsistentChainIssue]) -> None:
        if not issues:
            raise ValueError("InconsistentChain requires at least one issue")
        self.issues = issues
        first = issues[0]
        self.transition = first.transition
        self.routine = first.routine
        extra = f" (and {len(issues) - 1} more)" if len(issues) > 1 else ""
        super().__init__(
            f"Inconsistent delta chain at {first.transition} "
            f"for routine {first.routine!r}{extra}"
        )


class CallMapFileError(CallMapError):
    """A persisted baseline or delta file is missing or malformed."""

    def __init__(self, path: object, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


def _describe(signature: Signature | None) -> str:
    return "absent" if signature is None else str(signature)
