"""TrustEngine — the entry point used by callers such as the CLI.

Ties the pieces together: records are ingested into a
:class:`~crev_trust.store.ProofStore`, trust distances are computed from a
store snapshot rooted at the local identity, and selectors are verified
against those distances.

Example
-------
::

    engine = TrustEngine(root=me.identity, verifier=Ed25519SignatureVerifier())
    report = engine.ingest(records)
    distances = engine.compute_trust(TrustDistanceParams(max_distance=5))
    verdict = engine.verify(CrateSelector("serde", "1.0.0"), distances)
"""
from __future__ import annotations

import datetime
import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Protocol, Union

from crev_trust.crypto.signature import SignatureVerifier
from crev_trust.identity import Identity
from crev_trust.proofs.proof import MalformedProofError, Proof
from crev_trust.proofs.selector import CrateSelector
from crev_trust.sources import ProofSource, fetch_all
from crev_trust.store.proof_store import (
    AddStatus,
    ProofRejectedError,
    ProofStore,
    ProofStoreSnapshot,
    RejectReason,
)
from crev_trust.store.repository import UndecodableLine
from crev_trust.trust.distance import TrustDistances, compute_distances
from crev_trust.trust.graph import build_graph
from crev_trust.trust.params import TrustDistanceParams
from crev_trust.verification.verdict import Verdict
from crev_trust.verification.verifier import verify, verify_many

logger = logging.getLogger(__name__)

DISTANCE_CACHE_SIZE = 16


class RootIdentityError(RuntimeError):
    """Raised when no local root identity is configured."""


class IdentityProvider(Protocol):
    def current_identity(self) -> Identity | None: ...


RootSource = Union[Identity, IdentityProvider, None]


@dataclass(frozen=True)
class Rejection:
    """A record that was not accepted during ingestion.

    Parameters
    ----------
    index:
        Position of the record in the ingested batch.
    reason:
        Why it was rejected.
    detail:
        Human-readable explanation.
    source:
        Name of the source the record came from, if known.
    """

    index: int
    reason: RejectReason
    detail: str
    source: str | None = None


@dataclass
class IngestReport:
    """Outcome of ingesting a batch of raw records.

    Parameters
    ----------
    accepted:
        Proofs that entered the store (inserted, replacing, or retained for
        audit as superseded).
    duplicates:
        Number of records already present in the store.
    rejected:
        Records that were refused, with reasons.
    failed_sources:
        Sources that could not be fetched, with error descriptions.
    """

    accepted: list[Proof] = field(default_factory=list)
    duplicates: int = 0
    rejected: list[Rejection] = field(default_factory=list)
    failed_sources: dict[str, str] = field(default_factory=dict)

    @property
    def accepted_count(self) -> int:
        return len(self.accepted)

    @property
    def rejected_count(self) -> int:
        return len(self.rejected)

    def rejected_by_reason(self) -> dict[RejectReason, int]:
        counts: dict[RejectReason, int] = {}
        for rejection in self.rejected:
            counts[rejection.reason] = counts.get(rejection.reason, 0) + 1
        return counts


class TrustEngine:
    """Proof ingestion, trust computation, and package verification.

    Parameters
    ----------
    root:
        The local identity, an object whose ``current_identity()`` returns
        it, or None when not configured. Trust computation and verification
        raise :class:`RootIdentityError` without one.
    verifier:
        Signature verification capability used by the default store.
    store:
        Existing proof store. A new one is created when omitted.
    clock:
        Callable returning the current UTC time, passed to a new store.
    cache_size:
        Maximum number of distance tables kept, one per parameter set.
    """

    def __init__(
        self,
        root: RootSource,
        verifier: SignatureVerifier,
        store: ProofStore | None = None,
        clock: Callable[[], datetime.datetime] | None = None,
        cache_size: int = DISTANCE_CACHE_SIZE,
    ) -> None:
        self._root_source = root
        self._store = store if store is not None else ProofStore(verifier, clock=clock)
        self._cache: dict[TrustDistanceParams, tuple[int, TrustDistances]] = {}
        self._cache_lock = threading.Lock()
        self._cache_size = max(1, cache_size)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def store(self) -> ProofStore:
        return self._store

    @property
    def root(self) -> Identity:
        """Resolve the root identity.

        Raises
        ------
        RootIdentityError
            If no root identity is configured.
        """
        source = self._root_source
        if source is None or isinstance(source, Identity):
            root = source
        else:
            root = source.current_identity()
        if root is None:
            raise RootIdentityError(
                "No local identity is configured. Create one before computing trust."
            )
        return root

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def ingest(
        self,
        records: Iterable[object],
        source: str | None = None,
    ) -> IngestReport:
        """Parse, verify, and store a batch of records.

        Each record is a raw dict or an already-parsed :class:`Proof`.
        Failures are reported per record and never abort the batch.
        """
        report = IngestReport()
        for index, record in enumerate(records):
            self._ingest_one(index, record, source, report)
        logger.info(
            "Ingested %d record(s): %d accepted, %d duplicate, %d rejected",
            report.accepted_count + report.duplicates + report.rejected_count,
            report.accepted_count,
            report.duplicates,
            report.rejected_count,
        )
        return report

    def _ingest_one(
        self,
        index: int,
        record: object,
        source: str | None,
        report: IngestReport,
    ) -> None:
        if isinstance(record, UndecodableLine):
            logger.warning("Rejected undecodable record %d from %s: %s", index, source, record)
            report.rejected.append(Rejection(index, RejectReason.MALFORMED, str(record), source))
            return

        try:
            proof = record if isinstance(record, Proof) else Proof.from_dict(record)
        except MalformedProofError as exc:
            logger.warning("Rejected malformed record %d from %s: %s", index, source, exc)
            report.rejected.append(Rejection(index, RejectReason.MALFORMED, str(exc), source))
            return

        try:
            status = self._store.add(proof)
        except ProofRejectedError as exc:
            report.rejected.append(Rejection(index, exc.reason, exc.detail, source))
            return

        if status is AddStatus.DUPLICATE:
            report.duplicates += 1
        else:
            report.accepted.append(proof)

    def fetch(
        self,
        sources: list[ProofSource],
        timeout: float = 30.0,
    ) -> IngestReport:
        """Fetch from *sources* concurrently and ingest whatever arrived.

        Sources that fail or time out are listed in
        ``IngestReport.failed_sources``; records from the others are
        ingested regardless.
        """
        fetched = fetch_all(sources, timeout=timeout)
        report = IngestReport(failed_sources=dict(fetched.failures))
        for index, (source_name, record) in enumerate(fetched.records):
            self._ingest_one(index, record, source_name, report)
        logger.info(
            "Fetched from %d source(s) (%d failed): %d accepted, %d rejected",
            len(sources),
            len(fetched.failures),
            report.accepted_count,
            report.rejected_count,
        )
        return report

    # ------------------------------------------------------------------
    # Trust and verification
    # ------------------------------------------------------------------

    def compute_trust(self, params: TrustDistanceParams | None = None) -> TrustDistances:
        """Compute trust distances from the root over a consistent snapshot.

        Results are cached per parameter set until the store changes. The
        returned table remembers its snapshot, so verifying against it later
        uses the same reviews the trust edges came from.
        """
        root = self.root
        params = params if params is not None else TrustDistanceParams()
        snapshot = self._store.snapshot()

        with self._cache_lock:
            cached = self._cache.get(params)
            if cached is not None and cached[0] == snapshot.revision and cached[1].root == root:
                return cached[1]

        graph = build_graph(snapshot)
        distances = compute_distances(graph, root, params)
        with self._cache_lock:
            self._remember(params, snapshot.revision, distances)
        return distances

    def _remember(
        self, params: TrustDistanceParams, revision: int, distances: TrustDistances
    ) -> None:
        """Cache *distances*, dropping stale revisions and the oldest overflow."""
        for key in [k for k, (rev, _) in self._cache.items() if rev != revision]:
            del self._cache[key]
        self._cache.pop(params, None)
        self._cache[params] = (revision, distances)
        while len(self._cache) > self._cache_size:
            del self._cache[next(iter(self._cache))]

    def _snapshot_for(self, distances: TrustDistances) -> ProofStoreSnapshot:
        source = distances.source
        if isinstance(source, ProofStoreSnapshot):
            return source
        return self._store.snapshot()

    def verify(
        self,
        selector: CrateSelector,
        distances: TrustDistances | None = None,
        params: TrustDistanceParams | None = None,
    ) -> Verdict:
        """Verify *selector*, computing distances with *params* when none are given.

        Reviews are read from the snapshot *distances* were computed from.
        """
        if distances is None:
            distances = self.compute_trust(params)
        return verify(selector, self._snapshot_for(distances), distances)

    def verify_many(
        self,
        selectors: Iterable[CrateSelector],
        distances: TrustDistances | None = None,
        params: TrustDistanceParams | None = None,
    ) -> dict[CrateSelector, Verdict]:
        """Verify several selectors against one distance table and snapshot."""
        if distances is None:
            distances = self.compute_trust(params)
        return verify_many(selectors, self._snapshot_for(distances), distances)
