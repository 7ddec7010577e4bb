"""Proof sources — where raw proof records come from.

A source is anything with a ``name`` and a ``fetch_proofs()`` method that
returns raw records. :func:`fetch_all` queries several sources at once on
worker threads. A source that fails or is slower than the timeout is
reported and skipped; records from the other sources are still returned.
"""
from __future__ import annotations

import json
import logging
import queue
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, runtime_checkable

from crev_trust.store.repository import read_jsonl

logger = logging.getLogger(__name__)


class ProofSourceError(Exception):
    """Raised when a proof source cannot be read."""


@runtime_checkable
class ProofSource(Protocol):
    """Supplies raw proof records."""

    name: str

    def fetch_proofs(self) -> list[object]:
        """Return every raw record the source holds."""
        ...


class FileProofSource:
    """Reads proof records from a file or a directory of files.

    Accepted formats: a JSON array of records, a single JSON object, or
    JSON lines. For a directory, every ``*.json`` and ``*.jsonl`` file
    beneath it is read in sorted order.

    Parameters
    ----------
    path:
        File or directory to read.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self.name = str(path)

    def fetch_proofs(self) -> list[object]:
        if not self._path.exists():
            raise ProofSourceError(f"Proof source {self.name!r} does not exist.")
        if self._path.is_dir():
            files = sorted(
                p for p in self._path.rglob("*") if p.suffix in (".json", ".jsonl")
            )
        else:
            files = [self._path]

        records: list[object] = []
        for file in files:
            records.extend(self._read_file(file))
        return records

    @staticmethod
    def _read_file(path: Path) -> list[object]:
        try:
            if path.suffix == ".jsonl":
                return read_jsonl(path)
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ProofSourceError(f"Could not read proofs from {path}: {exc}") from exc
        if isinstance(data, list):
            return data
        return [data]


@dataclass
class FetchResult:
    """Records gathered from several sources.

    Parameters
    ----------
    records:
        ``(source name, raw record)`` pairs in source order.
    failures:
        Source name to error description for sources that failed or timed out.
    """

    records: list[tuple[str, object]] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)


def fetch_all(
    sources: list[ProofSource],
    timeout: float = 30.0,
    max_workers: int = 8,
) -> FetchResult:
    """Fetch from every source concurrently.

    Parameters
    ----------
    sources:
        Sources to query.
    timeout:
        Seconds each source may run. The clock for a source starts when a
        worker picks it up, so sources queued behind slow ones get their
        full allowance. A source still running at its deadline is recorded
        as timed out and its worker thread is abandoned.
    max_workers:
        Maximum number of sources running at once.

    Returns
    -------
    FetchResult
    """
    result = FetchResult()
    if not sources:
        return result

    finished: queue.Queue[tuple[int, list[object] | None, BaseException | None]] = queue.Queue()
    outcomes: dict[int, tuple[list[object] | None, BaseException | None]] = {}
    pending = list(range(len(sources)))
    pending.reverse()
    deadlines: dict[int, float] = {}
    slots = max(1, max_workers)

    while pending or deadlines:
        while pending and len(deadlines) < slots:
            index = pending.pop()
            deadlines[index] = time.monotonic() + timeout
            threading.Thread(
                target=_run_source,
                args=(index, sources[index], finished),
                name=f"proof-source-{index}",
                daemon=True,
            ).start()

        wait_for = max(0.0, min(deadlines.values()) - time.monotonic())
        try:
            index, records, exc = finished.get(timeout=wait_for)
        except queue.Empty:
            now = time.monotonic()
            for index in [i for i, deadline in deadlines.items() if deadline <= now]:
                del deadlines[index]
                logger.warning(
                    "Proof source %s timed out after %.1fs", sources[index].name, timeout
                )
                result.failures[sources[index].name] = f"timed out after {timeout:.1f}s"
            continue
        if index in deadlines:
            del deadlines[index]
            outcomes[index] = (records, exc)

    for index, source in enumerate(sources):
        if index not in outcomes:
            continue
        records, exc = outcomes[index]
        if exc is not None:
            logger.warning("Proof source %s failed: %s", source.name, exc)
            result.failures[source.name] = str(exc)
            continue
        assert records is not None
        logger.info("Fetched %d record(s) from %s", len(records), source.name)
        result.records.extend((source.name, record) for record in records)

    return result


def _run_source(
    index: int,
    source: ProofSource,
    finished: queue.Queue[tuple[int, list[object] | None, BaseException | None]],
) -> None:
    try:
        records = source.fetch_proofs()
    except Exception as exc:  # reported through FetchResult.failures
        finished.put((index, None, exc))
        return
    finished.put((index, records, None))
