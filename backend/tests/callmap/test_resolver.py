"""Tests for callmap.resolver: backward resolution through the delta chain."""

import pytest

from callmap.chain import ChainEntry, DeltaChain
from callmap.delta import ChangedSignature, Delta, diff
from callmap.errors import (
    CallMapError,
    InconsistentChain,
    RoutineStateConflict,
    UnknownVersion,
    UnsupportedFutureVersion,
)
from callmap.loader import load_callmap
from callmap.resolver import Resolver, resolve
from callmap.signature import Signature
from callmap.version import Version, VersionTransition

T82_83 = VersionTransition.of("8.2", "8.3")
T83_84 = VersionTransition.of("8.3", "8.4")

STRLEN = Signature.of("int", ("string", "string"))
JSON_VALIDATE = Signature.of("bool", ("json", "string"), ("depth=", "int"))
EXIT_83 = Signature.of("mixed", ("status", "int|string"))
EXIT_84 = Signature.of("mixed", ("status=", "int|string"))
LEGACY = Signature.of("string", ("string", "string"))

TABLE_82 = {"strlen": STRLEN, "exit": EXIT_83, "legacy": LEGACY}
TABLE_83 = {"strlen": STRLEN, "exit": EXIT_83, "json_validate": JSON_VALIDATE}
TABLE_84 = {"strlen": STRLEN, "exit": EXIT_84, "json_validate": JSON_VALIDATE}


def _chain() -> DeltaChain:
    return DeltaChain.from_entries(
        [(T82_83, diff(TABLE_82, TABLE_83)), (T83_84, diff(TABLE_83, TABLE_84))]
    )


class TestResolve:
    """Tests for the module-level resolve()."""

    def test_round_trip_single_transition(self) -> None:
        """resolve(B, newer, chain(diff(A, B)), older) == A."""
        chain = DeltaChain().append(T83_84, diff(TABLE_83, TABLE_84))
        assert resolve(TABLE_84, "8.4", chain, "8.3") == TABLE_83

    def test_identity_at_baseline(self) -> None:
        result = resolve(TABLE_84, "8.4", _chain(), "8.4")
        assert result == TABLE_84
        assert result is not TABLE_84

    def test_two_steps_back(self) -> None:
        assert resolve(TABLE_84, "8.4", _chain(), "8.2") == TABLE_82

    def test_intermediate_version(self) -> None:
        assert resolve(TABLE_84, "8.4", _chain(), "8.3") == TABLE_83

    def test_idempotent(self) -> None:
        chain = _chain()
        first = resolve(TABLE_84, "8.4", chain, "8.2")
        second = resolve(TABLE_84, "8.4", chain, "8.2")
        assert first == second
        assert first is not second

    def test_baseline_not_mutated(self) -> None:
        baseline = dict(TABLE_84)
        resolve(baseline, "8.4", _chain(), "8.2")
        assert baseline == TABLE_84

    def test_future_version(self) -> None:
        with pytest.raises(UnsupportedFutureVersion) as exc_info:
            resolve(TABLE_84, "8.4", _chain(), "8.5")
        assert exc_info.value.version == Version.parse("8.5")
        assert exc_info.value.baseline_version == Version.parse("8.4")

    def test_unknown_version(self) -> None:
        with pytest.raises(UnknownVersion) as exc_info:
            resolve(TABLE_84, "8.4", _chain(), "8.1")
        assert exc_info.value.version == Version.parse("8.1")

    def test_empty_chain_only_resolves_baseline(self) -> None:
        assert resolve(TABLE_84, "8.4", DeltaChain(), "8.4") == TABLE_84
        with pytest.raises(UnknownVersion):
            resolve(TABLE_84, "8.4", DeltaChain(), "8.3")

    def test_chain_must_end_at_baseline(self) -> None:
        chain = DeltaChain().append(T82_83, diff(TABLE_82, TABLE_83))
        with pytest.raises(UnknownVersion, match="ends at 8.3"):
            resolve(TABLE_84, "8.4", chain, "8.2")


class TestRoutineStateConflict:
    """The working table must match each delta's newer side."""

    def test_changed_new_mismatch(self) -> None:
        wrong = Signature.of("mixed", ("code=", "int"))
        chain = DeltaChain().append(
            T83_84, Delta(changed={"exit": ChangedSignature(old=EXIT_83, new=wrong)})
        )
        with pytest.raises(RoutineStateConflict) as exc_info:
            resolve(TABLE_84, "8.4", chain, "8.3")
        assert exc_info.value.routine == "exit"
        assert exc_info.value.transition == T83_84
        assert exc_info.value.expected == wrong
        assert exc_info.value.actual == EXIT_84

    def test_removed_routine_still_present(self) -> None:
        chain = DeltaChain().append(T83_84, Delta(removed={"strlen": STRLEN}))
        with pytest.raises(RoutineStateConflict) as exc_info:
            resolve(TABLE_84, "8.4", chain, "8.3")
        assert exc_info.value.expected is None
        assert exc_info.value.actual == STRLEN

    def test_added_routine_missing(self) -> None:
        chain = DeltaChain().append(T83_84, Delta(added={"array_find": STRLEN}))
        with pytest.raises(RoutineStateConflict) as exc_info:
            resolve(TABLE_84, "8.4", chain, "8.3")
        assert exc_info.value.routine == "array_find"
        assert exc_info.value.actual is None

    def test_changed_routine_missing(self) -> None:
        chain = DeltaChain().append(
            T83_84, Delta(changed={"gone": ChangedSignature(old=STRLEN, new=LEGACY)})
        )
        with pytest.raises(RoutineStateConflict):
            resolve(TABLE_84, "8.4", chain, "8.3")


class TestResolver:
    """Tests for the Resolver class."""

    def test_resolves(self) -> None:
        resolver = Resolver(TABLE_84, "8.4", _chain())
        assert resolver.resolve("8.2") == TABLE_82
        assert resolver.versions == tuple(Version.parse(v) for v in ("8.2", "8.3", "8.4"))

    def test_empty_chain_versions(self) -> None:
        resolver = Resolver(TABLE_84, "8.4", DeltaChain())
        assert resolver.versions == (Version.parse("8.4"),)

    def test_inconsistent_chain_rejected(self) -> None:
        other = Signature.of("never", ("status", "int"))
        chain = DeltaChain.from_entries(
            [
                (T82_83, Delta(changed={"exit": ChangedSignature(old=other, new=EXIT_83)})),
                (T83_84, Delta(changed={"exit": ChangedSignature(old=other, new=EXIT_84)})),
            ]
        )
        with pytest.raises(InconsistentChain) as exc_info:
            Resolver(TABLE_84, "8.4", chain)
        assert exc_info.value.transition == T83_84
        assert exc_info.value.routine == "exit"

    def test_head_mismatch_rejected(self) -> None:
        with pytest.raises(UnknownVersion):
            Resolver(TABLE_84, "8.5", _chain())


class TestFixtureScenario:
    """End-to-end over the 8.4 delta sample."""

    def test_openssl_csr_sign_at_83(self, callmap_dir, callmap_versions) -> None:
        data = load_callmap(callmap_dir, callmap_versions)
        table = Resolver(data.baseline, data.baseline_version, data.chain).resolve("8.3")

        baseline_sig = data.baseline["openssl_csr_sign"]
        assert baseline_sig.parameter("serial_hex") is not None

        sig = table["openssl_csr_sign"]
        assert sig.parameter("serial_hex") is None
        days = sig.parameter("days")
        serial = sig.parameter("serial")
        assert days is not None and days.type == "int" and days.optional is False
        assert serial is not None and serial.type == "int" and serial.optional is True
        assert sig.parameter_names == baseline_sig.parameter_names[:-1]

    def test_marker_changes_reverted_at_83(self, callmap_dir, callmap_versions) -> None:
        data = load_callmap(callmap_dir, callmap_versions)
        table = resolve(data.baseline, data.baseline_version, data.chain, "8.3")
        assert table["exit"].parameter("status").optional is False  # type: ignore[union-attr]
        assert table["pg_select"].parameter("conditions").optional is False  # type: ignore[union-attr]

    def test_added_routines_absent_at_82(self, callmap_dir, callmap_versions) -> None:
        data = load_callmap(callmap_dir, callmap_versions)
        table = resolve(data.baseline, data.baseline_version, data.chain, "8.2")
        assert "json_validate" not in table
        assert "mb_str_pad" not in table
        assert "utf8_encode_legacy" in table
        assert table["strlen"] == data.baseline["strlen"]


class TestGappedChain:
    def test_gap_never_reaches_resolution(self) -> None:
        """A chain missing 8.2 -> 8.3 cannot be built, so it cannot resolve."""
        a = Signature.of("int", ("a", "int"))
        b = Signature.of("int", ("a", "int"), ("b=", "int"))
        c = Signature.of("int", ("a", "int"), ("b=", "int"), ("c=", "int"))
        with pytest.raises(CallMapError):
            chain = DeltaChain(
                entries=(
                    ChainEntry(
                        VersionTransition.of("8.1", "8.2"),
                        Delta(changed={"r": ChangedSignature(old=a, new=b)}),
                    ),
                    ChainEntry(T83_84, Delta(changed={"r": ChangedSignature(old=b, new=c)})),
                )
            )
            Resolver({"r": c}, "8.4", chain).resolve("8.1")
