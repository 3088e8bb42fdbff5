"""Tests for callmap.loader: persisted baseline and delta files."""

import json
from pathlib import Path

import pytest

from callmap.delta import diff
from callmap.errors import CallMapFileError, NonContiguousTransition
from callmap.loader import (
    delta_file_name,
    delta_to_document,
    discover_delta_files,
    load_callmap,
    load_chain,
    parse_delta,
    read_baseline,
    read_delta,
    write_delta_file,
)
from callmap.signature import Signature
from callmap.version import Version, VersionTransition


def _write_json(path: Path, document: object) -> Path:
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


class TestReadBaseline:
    def test_fixture_baseline(self, callmap_dir: Path) -> None:
        table = read_baseline(callmap_dir / "CallMap.json")
        assert table["strlen"] == Signature.of("int<0, max>", ("string", "string"))
        assert table["exit"].parameter("status").optional is True  # type: ignore[union-attr]

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(CallMapFileError, match="file not found"):
            read_baseline(tmp_path / "CallMap.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "CallMap.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CallMapFileError, match="invalid JSON"):
            read_baseline(path)

    def test_wrong_shape(self, tmp_path: Path) -> None:
        path = _write_json(tmp_path / "CallMap.json", {"strlen": ["int", "string"]})
        with pytest.raises(CallMapFileError, match="invalid baseline"):
            read_baseline(path)

    def test_missing_return_type(self, tmp_path: Path) -> None:
        path = _write_json(tmp_path / "CallMap.json", {"strlen": {"string": "string"}})
        with pytest.raises(CallMapFileError, match="no return type"):
            read_baseline(path)


class TestReadDelta:
    def test_sample_delta(self, callmap_dir: Path) -> None:
        delta = read_delta(callmap_dir / "CallMap_84_delta.json")
        assert not delta.added
        assert not delta.removed
        assert set(delta.changed) == {"exit", "openssl_csr_sign", "pg_select"}
        openssl = delta.changed["openssl_csr_sign"]
        assert openssl.old.parameter("serial_hex") is None
        assert openssl.new.parameter("serial_hex") is not None

    def test_partitions_optional(self) -> None:
        delta = parse_delta({"added": {"f": {"0": "int"}}})
        assert set(delta.added) == {"f"}
        assert not delta.changed

    def test_unknown_partition_rejected(self, tmp_path: Path) -> None:
        path = _write_json(tmp_path / "CallMap_84_delta.json", {"renamed": {}})
        with pytest.raises(CallMapFileError, match="invalid delta"):
            read_delta(path)

    def test_noop_change_rejected(self, tmp_path: Path) -> None:
        same = {"0": "int", "a": "int"}
        path = _write_json(
            tmp_path / "CallMap_84_delta.json",
            {"changed": {"f": {"old": same, "new": same}}},
        )
        with pytest.raises(CallMapFileError, match="identical"):
            read_delta(path)


class TestLoadChain:
    def test_fixture_chain(self, callmap_dir: Path, callmap_versions: list[str]) -> None:
        chain = load_chain(callmap_dir, callmap_versions)
        assert chain.transitions == (
            VersionTransition.of("8.2", "8.3"),
            VersionTransition.of("8.3", "8.4"),
        )

    def test_discover(self, callmap_dir: Path) -> None:
        found = discover_delta_files(callmap_dir)
        assert set(found) == {Version.parse("8.3"), Version.parse("8.4")}

    def test_unsupported_version(self, callmap_dir: Path) -> None:
        with pytest.raises(CallMapFileError, match="not supported"):
            load_chain(callmap_dir, ["8.4"])

    def test_oldest_version_has_no_delta(self, callmap_dir: Path) -> None:
        with pytest.raises(CallMapFileError, match="oldest supported"):
            load_chain(callmap_dir, ["8.3", "8.4"])

    def test_gap_in_files(self, tmp_path: Path) -> None:
        _write_json(tmp_path / "CallMap_82_delta.json", {})
        _write_json(tmp_path / "CallMap_84_delta.json", {})
        with pytest.raises(NonContiguousTransition):
            load_chain(tmp_path, ["8.1", "8.2", "8.3", "8.4"])

    def test_load_callmap(self, callmap_dir: Path, callmap_versions: list[str]) -> None:
        data = load_callmap(callmap_dir, callmap_versions)
        assert data.baseline_version == Version.parse("8.4")
        assert len(data.chain) == 2
        assert "openssl_csr_sign" in data.baseline

    def test_load_callmap_requires_versions(self, callmap_dir: Path) -> None:
        with pytest.raises(ValueError, match="At least one"):
            load_callmap(callmap_dir, [])


class TestWriteDelta:
    def test_file_name(self) -> None:
        assert delta_file_name("8.4") == "CallMap_84_delta.json"

    def test_file_name_requires_single_digit_major(self) -> None:
        with pytest.raises(ValueError, match="no compact form"):
            delta_file_name("10.1")

    def test_document_shape(self, exit_old, exit_new) -> None:
        document = delta_to_document(diff({"exit": exit_old}, {"exit": exit_new}))
        assert document == {
            "added": {},
            "changed": {
                "exit": {
                    "old": {"0": "mixed", "status": "int|string"},
                    "new": {"0": "mixed", "status=": "int|string"},
                }
            },
            "removed": {},
        }

    def test_written_file_reads_back(self, tmp_path: Path, callmap_dir: Path) -> None:
        original = read_delta(callmap_dir / "CallMap_84_delta.json")
        path = write_delta_file(original, tmp_path / "out" / delta_file_name("8.4"))
        assert read_delta(path) == original
