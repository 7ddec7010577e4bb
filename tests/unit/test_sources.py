"""Tests for crev_trust.sources and crev_trust.store.repository."""
from __future__ import annotations

import json
import threading
from pathlib import Path

import pytest

from crev_trust.identity import Identity
from crev_trust.proofs.proof import Proof
from crev_trust.proofs.signer import ProofSigner
from crev_trust.sources import FileProofSource, ProofSource, ProofSourceError, fetch_all
from crev_trust.store.repository import JsonlProofRepository, UndecodableLine, read_jsonl


@pytest.fixture()
def signer() -> ProofSigner:
    return ProofSigner.generate("alice")


class StaticSource:
    def __init__(self, name: str, records: list[object]) -> None:
        self.name = name
        self._records = records

    def fetch_proofs(self) -> list[object]:
        return list(self._records)


class FailingSource:
    name = "broken"

    def fetch_proofs(self) -> list[object]:
        raise OSError("connection refused")


class BlockingSource:
    name = "slow"

    def __init__(self) -> None:
        self.release = threading.Event()

    def fetch_proofs(self) -> list[object]:
        self.release.wait(5)
        return [{"late": True}]


# ---------------------------------------------------------------------------
# JsonlProofRepository
# ---------------------------------------------------------------------------


class TestJsonlProofRepository:
    def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        assert JsonlProofRepository(tmp_path / "proofs.jsonl").load_records() == []

    def test_append_and_load(self, tmp_path: Path, signer: ProofSigner) -> None:
        repository = JsonlProofRepository(tmp_path / "nested" / "proofs.jsonl")
        proofs = [signer.trust(Identity("bob")), signer.distrust(Identity("carol"))]
        assert repository.extend(proofs) == 2

        records = repository.load_records()
        assert [Proof.from_dict(record) for record in records] == proofs

    def test_undecodable_lines_reported_in_place(self, tmp_path: Path) -> None:
        path = tmp_path / "proofs.jsonl"
        path.write_text('{"a": 1}\n\nnot json\n{"b": 2}\n', encoding="utf-8")
        records = read_jsonl(path)
        assert len(records) == 3
        assert records[0] == {"a": 1}
        assert records[2] == {"b": 2}
        bad = records[1]
        assert isinstance(bad, UndecodableLine)
        assert bad.line_no == 3
        assert bad.path == path
        assert "line 3" in str(bad)

    def test_load_records_keeps_undecodable_lines(self, tmp_path: Path) -> None:
        path = tmp_path / "proofs.jsonl"
        path.write_text("{broken\n", encoding="utf-8")
        records = JsonlProofRepository(path).load_records()
        assert len(records) == 1
        assert isinstance(records[0], UndecodableLine)


# ---------------------------------------------------------------------------
# FileProofSource
# ---------------------------------------------------------------------------


class TestFileProofSource:
    def test_satisfies_protocol(self, tmp_path: Path) -> None:
        assert isinstance(FileProofSource(tmp_path), ProofSource)

    def test_json_array(self, tmp_path: Path) -> None:
        path = tmp_path / "proofs.json"
        path.write_text(json.dumps([{"a": 1}, {"b": 2}]), encoding="utf-8")
        assert FileProofSource(path).fetch_proofs() == [{"a": 1}, {"b": 2}]

    def test_single_object(self, tmp_path: Path) -> None:
        path = tmp_path / "proof.json"
        path.write_text(json.dumps({"a": 1}), encoding="utf-8")
        assert FileProofSource(path).fetch_proofs() == [{"a": 1}]

    def test_directory_reads_sorted_files(self, tmp_path: Path) -> None:
        (tmp_path / "sub").mkdir()
        (tmp_path / "b.json").write_text(json.dumps({"b": 1}), encoding="utf-8")
        (tmp_path / "sub" / "c.jsonl").write_text('{"c": 1}\n', encoding="utf-8")
        (tmp_path / "a.jsonl").write_text('{"a": 1}\n', encoding="utf-8")
        (tmp_path / "notes.txt").write_text("ignored", encoding="utf-8")
        assert FileProofSource(tmp_path).fetch_proofs() == [{"a": 1}, {"b": 1}, {"c": 1}]

    def test_missing_path_raises(self, tmp_path: Path) -> None:
        with pytest.raises(ProofSourceError, match="does not exist"):
            FileProofSource(tmp_path / "missing").fetch_proofs()

    def test_invalid_json_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(ProofSourceError, match="Could not read"):
            FileProofSource(path).fetch_proofs()


# ---------------------------------------------------------------------------
# fetch_all
# ---------------------------------------------------------------------------


class TestFetchAll:
    def test_no_sources(self) -> None:
        result = fetch_all([])
        assert result.records == []
        assert result.failures == {}

    def test_records_keep_source_order(self, tmp_path: Path) -> None:
        first = tmp_path / "first.json"
        second = tmp_path / "second.json"
        first.write_text(json.dumps([{"n": 1}, {"n": 2}]), encoding="utf-8")
        second.write_text(json.dumps({"n": 3}), encoding="utf-8")

        result = fetch_all([FileProofSource(first), FileProofSource(second)])
        assert [record for _, record in result.records] == [{"n": 1}, {"n": 2}, {"n": 3}]
        assert result.records[2][0] == str(second)

    def test_partial_failure(self, tmp_path: Path) -> None:
        good = tmp_path / "good.json"
        good.write_text(json.dumps({"n": 1}), encoding="utf-8")
        missing = tmp_path / "missing.json"

        result = fetch_all([FileProofSource(missing), FileProofSource(good)])
        assert [record for _, record in result.records] == [{"n": 1}]
        assert list(result.failures) == [str(missing)]

    def test_failing_source_records_error(self) -> None:
        result = fetch_all([FailingSource(), StaticSource("good", [{"n": 1}])], timeout=5)
        assert result.failures == {"broken": "connection refused"}
        assert result.records == [("good", {"n": 1})]

    def test_queued_sources_get_their_own_deadline(self) -> None:
        slow = BlockingSource()
        fast = [StaticSource(f"fast-{i}", [{"n": i}]) for i in range(3)]
        try:
            result = fetch_all([slow, *fast], timeout=0.3, max_workers=1)
        finally:
            slow.release.set()
        assert list(result.failures) == ["slow"]
        assert "timed out" in result.failures["slow"]
        assert result.records == [(f"fast-{i}", {"n": i}) for i in range(3)]

    def test_abandoned_workers_are_daemon_threads(self) -> None:
        slow = BlockingSource()
        try:
            fetch_all([slow], timeout=0.1)
            workers = [t for t in threading.enumerate() if t.name.startswith("proof-source-")]
            assert workers
            assert all(worker.daemon for worker in workers)
        finally:
            slow.release.set()
