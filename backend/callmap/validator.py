"""Consistency validation for delta chains.

Pure functions with no I/O. Walks a DeltaChain oldest-first and checks that
every transition agrees with the previous assertion made about each routine
it touches: the newer side asserted by one transition must equal the older
side asserted by the next transition that mentions the same routine.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from callmap.chain import DeltaChain
from callmap.errors import InconsistentChain
from callmap.signature import Signature
from callmap.version import VersionTransition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InconsistentChainIssue:
    """A routine whose state disagrees between two transitions.

    Attributes:
        transition: The later transition, whose older side is wrong or whose
            predecessor's newer side is wrong.
        routine: Routine name.
        previous_transition: The earlier transition that made the conflicting
            assertion.
        expected: State asserted by ``previous_transition`` (None = absent).
        actual: State asserted by ``transition`` (None = absent).
    """

    transition: VersionTransition
    routine: str
    previous_transition: VersionTransition
    expected: Signature | None
    actual: Signature | None

    def __str__(self) -> str:
        return (
            f"{self.transition}: {self.routine} "
            f"(previous assertion from {self.previous_transition})"
        )


@dataclass
class ChainValidationResult:
    """Result of validating a delta chain."""

    transitions_checked: int = 0
    routines_checked: int = 0
    issues: list[InconsistentChainIssue] = field(default_factory=list)

    @property
    def is_consistent(self) -> bool:
        """True if no transition contradicts an earlier one."""
        return not self.issues


def validate(chain: DeltaChain) -> ChainValidationResult:
    """Check that a delta chain composes without contradiction.

    For every routine, the state a transition asserts on its older side
    (``added`` -> absent, ``changed`` -> old, ``removed`` -> present) is
    compared with the state the most recent earlier transition mentioning
    that routine asserted on its newer side (``added`` -> present,
    ``changed`` -> new, ``removed`` -> absent). Adjacent transitions are the
    common case; untouched transitions in between carry the state forward.

    Args:
        chain: The chain to validate.

    Returns:
        ChainValidationResult listing every divergence, oldest first.
    """
    result = ChainValidationResult()
    # routine -> (transition that last mentioned it, newer-side state)
    last_seen: dict[str, tuple[VersionTransition, Signature | None]] = {}

    for entry in chain:
        result.transitions_checked += 1
        delta = entry.delta
        for routine in sorted(delta.routines):
            result.routines_checked += 1
            previous = last_seen.get(routine)
            if previous is not None:
                previous_transition, asserted = previous
                older_side = delta.older_state(routine)
                if asserted != older_side:
                    result.issues.append(
                        InconsistentChainIssue(
                            transition=entry.transition,
                            routine=routine,
                            previous_transition=previous_transition,
                            expected=asserted,
                            actual=older_side,
                        )
                    )
            last_seen[routine] = (entry.transition, delta.newer_state(routine))

    if result.issues:
        logger.warning(
            f"Delta chain has {len(result.issues)} inconsistencies; "
            f"first at {result.issues[0]}"
        )
    else:
        logger.debug(
            f"Delta chain consistent: {result.transitions_checked} transitions, "
            f"{result.routines_checked} routine entries"
        )
    return result


def ensure_consistent(chain: DeltaChain) -> None:
    """Validate the chain and raise on the first inconsistency.

    Raises:
        InconsistentChain: Carrying every issue found.
    """
    result = validate(chain)
    if not result.is_consistent:
        raise InconsistentChain(result.issues)
