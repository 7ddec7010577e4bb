"""Proof repository — abstract interface and JSONL file implementation.

A repository is the local persisted log of proofs the user has issued or
fetched. It stores raw records; the :class:`~crev_trust.store.ProofStore`
re-verifies every record when it is loaded.
"""
from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from crev_trust.proofs.proof import Proof

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UndecodableLine:
    """Placeholder for a line of a JSON-lines file that is not valid JSON.

    Kept in the record list so ingestion can report it as malformed.
    """

    path: Path
    line_no: int
    error: str

    def __str__(self) -> str:
        return f"line {self.line_no} of {self.path} is not valid JSON: {self.error}"


class ProofRepository(ABC):
    """Abstract base class for proof persistence backends."""

    @abstractmethod
    def append(self, proof: Proof) -> None:
        """Persist a single proof.

        Parameters
        ----------
        proof:
            The proof to store.
        """

    @abstractmethod
    def load_records(self) -> list[object]:
        """Return every stored record in insertion order.

        Records are returned unparsed so that the caller can reject and
        report malformed ones.
        """

    def extend(self, proofs: Iterable[Proof]) -> int:
        """Persist several proofs. Returns the number written."""
        count = 0
        for proof in proofs:
            self.append(proof)
            count += 1
        return count


class JsonlProofRepository(ProofRepository):
    """Proof log stored as one JSON object per line.

    Parameters
    ----------
    path:
        File to append to. Parent directories are created on first write.
    """

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def append(self, proof: Proof) -> None:
        """Append the proof's JSON record to the log."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        line = json.dumps(proof.to_dict(), sort_keys=True)
        with self._path.open("a", encoding="utf-8") as handle:
            handle.write(line + "\n")

    def load_records(self) -> list[object]:
        """Read all records. Lines that are not JSON come back as :class:`UndecodableLine`."""
        if not self._path.exists():
            return []
        return read_jsonl(self._path)


def read_jsonl(path: Path) -> list[object]:
    """Parse a JSON-lines file.

    Blank lines are skipped. Each undecodable line is logged and returned as
    an :class:`UndecodableLine` in its position.
    """
    records: list[object] = []
    with path.open("r", encoding="utf-8") as handle:
        for line_no, line in enumerate(handle, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                records.append(json.loads(line))
            except json.JSONDecodeError as exc:
                logger.warning("Undecodable line %d in %s: %s", line_no, path, exc)
                records.append(UndecodableLine(path, line_no, exc.msg))
    return records
