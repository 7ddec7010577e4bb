"""ProofStore — in-memory collection of verified proofs.

Only proofs whose signature verifies and whose date is not in the future
are accepted. For each ``(issuer, subject)`` key the newest proof is the
effective one; older proofs are kept in the audit history but no longer
take part in queries. Nothing is ever deleted.

Readers that need a consistent view across several queries (a whole
verification run) should take a :meth:`ProofStore.snapshot`.
"""
from __future__ import annotations

import datetime
import logging
import threading
from collections.abc import Callable, Iterable
from enum import Enum

from crev_trust.crypto.signature import SignatureVerifier
from crev_trust.identity import Identity
from crev_trust.proofs.proof import PACKAGE_KINDS, Proof, ProofKind
from crev_trust.proofs.selector import CrateSelector

logger = logging.getLogger(__name__)


class RejectReason(str, Enum):
    """Why a proof was refused entry to the store."""

    MALFORMED = "malformed"
    INVALID_SIGNATURE = "invalid_signature"
    FUTURE_TIMESTAMP = "future_timestamp"


class ProofRejectedError(ValueError):
    """Raised by :meth:`ProofStore.add` when a proof cannot be accepted."""

    def __init__(self, reason: RejectReason, detail: str) -> None:
        super().__init__(f"Proof rejected ({reason.value}): {detail}")
        self.reason = reason
        self.detail = detail


class AddStatus(str, Enum):
    """What :meth:`ProofStore.add` did with an accepted proof."""

    INSERTED = "inserted"
    REPLACED = "replaced"
    SUPERSEDED = "superseded"
    DUPLICATE = "duplicate"


def _is_newer(candidate: Proof, current: Proof) -> bool:
    """Order proofs by date, breaking ties by digest so arrival order never matters."""
    if candidate.date != current.date:
        return candidate.date > current.date
    return candidate.digest > current.digest


class _ProofIndex:
    """Effective proofs keyed by subject key, with read queries."""

    def __init__(self, effective: dict[tuple[str, ...], Proof]) -> None:
        self._effective = effective

    def effective_proofs(
        self, kinds: Iterable[ProofKind] | None = None
    ) -> list[Proof]:
        """Return effective proofs sorted by subject key, optionally filtered by kind."""
        wanted = frozenset(kinds) if kinds is not None else None
        return [
            proof
            for key, proof in sorted(self._effective.items())
            if wanted is None or proof.kind in wanted
        ]

    def proofs_from(self, identity: Identity) -> list[Proof]:
        """Return effective proofs issued by *identity*."""
        return [p for p in self.effective_proofs() if p.issuer == identity]

    def proofs_about(self, selector: CrateSelector) -> list[Proof]:
        """Return effective review and flag proofs whose crate matches *selector*."""
        return [
            p
            for p in self.effective_proofs(PACKAGE_KINDS)
            if p.crate is not None and selector.matches(p.crate)
        ]

    def identities(self) -> list[Identity]:
        """Return every identity appearing as issuer or subject, sorted by id."""
        seen: set[Identity] = set()
        for proof in self._effective.values():
            seen.add(proof.issuer)
            if proof.subject is not None:
                seen.add(proof.subject)
        return sorted(seen)

    def __len__(self) -> int:
        return len(self._effective)


class ProofStoreSnapshot(_ProofIndex):
    """Immutable point-in-time copy of a :class:`ProofStore`.

    Parameters
    ----------
    effective:
        Effective proofs keyed by subject key.
    revision:
        Store revision at the time the snapshot was taken.
    """

    def __init__(self, effective: dict[tuple[str, ...], Proof], revision: int) -> None:
        super().__init__(dict(effective))
        self.revision = revision


class ProofStore:
    """Thread-safe store of verified proofs.

    Parameters
    ----------
    verifier:
        Signature verification capability.
    clock:
        Callable returning the current UTC time. Defaults to the system clock.
    clock_skew:
        Tolerance for proof dates ahead of *clock*. Defaults to zero.
    """

    def __init__(
        self,
        verifier: SignatureVerifier,
        clock: Callable[[], datetime.datetime] | None = None,
        clock_skew: datetime.timedelta = datetime.timedelta(0),
    ) -> None:
        self._verifier = verifier
        self._clock = clock if clock is not None else (
            lambda: datetime.datetime.now(datetime.timezone.utc)
        )
        self._clock_skew = clock_skew
        self._effective: dict[tuple[str, ...], Proof] = {}
        self._history: list[Proof] = []
        self._digests: set[str] = set()
        self._revision = 0
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add(self, proof: Proof) -> AddStatus:
        """Verify and insert a proof.

        Parameters
        ----------
        proof:
            The proof to add.

        Returns
        -------
        AddStatus
            ``INSERTED`` for a new key, ``REPLACED`` when it supersedes the
            effective proof, ``SUPERSEDED`` when an effective proof is newer,
            ``DUPLICATE`` when this exact proof was already accepted.

        Raises
        ------
        ProofRejectedError
            If the signature does not verify or the proof is dated in the
            future.
        """
        self._check_signature(proof)
        now = self._clock()
        if proof.date > now + self._clock_skew:
            logger.warning(
                "Rejected proof from %s dated in the future (%s)",
                proof.issuer.id,
                proof.date.isoformat(),
            )
            raise ProofRejectedError(
                RejectReason.FUTURE_TIMESTAMP,
                f"proof dated {proof.date.isoformat()} is later than {now.isoformat()}",
            )

        digest = proof.digest
        key = proof.subject_key
        with self._lock:
            if digest in self._digests:
                logger.debug("Ignoring duplicate proof %s", digest)
                return AddStatus.DUPLICATE

            self._digests.add(digest)
            self._history.append(proof)
            self._revision += 1

            current = self._effective.get(key)
            if current is None:
                self._effective[key] = proof
                logger.debug("Inserted %s", proof.describe())
                return AddStatus.INSERTED
            if _is_newer(proof, current):
                self._effective[key] = proof
                logger.info("Superseded %s with %s", current.describe(), proof.describe())
                return AddStatus.REPLACED
            logger.debug("Retained older %s for audit only", proof.describe())
            return AddStatus.SUPERSEDED

    def _check_signature(self, proof: Proof) -> None:
        try:
            public_key = proof.issuer.public_key_bytes()
            signature = proof.signature_bytes()
        except ValueError as exc:
            logger.warning("Rejected proof from %s: %s", proof.issuer.id, exc)
            raise ProofRejectedError(RejectReason.INVALID_SIGNATURE, str(exc)) from exc

        if not self._verifier.verify_signature(proof.payload_bytes(), signature, public_key):
            logger.warning("Rejected proof from %s: bad signature", proof.issuer.id)
            raise ProofRejectedError(
                RejectReason.INVALID_SIGNATURE,
                f"signature does not verify for issuer {proof.issuer.id!r}",
            )

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    def snapshot(self) -> ProofStoreSnapshot:
        """Return a consistent immutable copy of the effective proofs."""
        with self._lock:
            return ProofStoreSnapshot(self._effective, self._revision)

    def effective_proofs(
        self, kinds: Iterable[ProofKind] | None = None
    ) -> list[Proof]:
        """Return effective proofs sorted by subject key, optionally filtered by kind."""
        return self.snapshot().effective_proofs(kinds)

    def proofs_from(self, identity: Identity) -> list[Proof]:
        """Return effective proofs issued by *identity*."""
        return self.snapshot().proofs_from(identity)

    def proofs_about(self, selector: CrateSelector) -> list[Proof]:
        """Return effective review and flag proofs matching *selector*."""
        return self.snapshot().proofs_about(selector)

    def identities(self) -> list[Identity]:
        """Return every identity known to the store, sorted by id."""
        return self.snapshot().identities()

    def history(self) -> list[Proof]:
        """Return every accepted proof, including superseded ones, in acceptance order."""
        with self._lock:
            return list(self._history)

    @property
    def revision(self) -> int:
        """Counter incremented each time the store's contents change."""
        with self._lock:
            return self._revision

    def __contains__(self, proof: object) -> bool:
        if not isinstance(proof, Proof):
            return False
        with self._lock:
            return proof.digest in self._digests

    def __len__(self) -> int:
        """Return the number of effective proofs."""
        with self._lock:
            return len(self._effective)
