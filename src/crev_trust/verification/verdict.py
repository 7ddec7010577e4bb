"""Verdict types produced by package verification."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from crev_trust.identity import Identity
from crev_trust.proofs.proof import Proof
from crev_trust.proofs.selector import CrateSelector


class VerdictKind(str, Enum):
    """Classification of the evidence about a package selector.

    TRUSTED:
        At least one reviewer within the trust budget vouches for it and
        nobody within the budget flagged it.
    UNKNOWN:
        No review or flag from within the trust budget.
    FLAGGED:
        At least one identity within the trust budget flagged it.
    """

    TRUSTED = "trusted"
    UNKNOWN = "unknown"
    FLAGGED = "flagged"


@dataclass(frozen=True)
class Evidence:
    """One qualifying proof and its issuer's trust distance.

    Parameters
    ----------
    identity:
        Issuer of the proof.
    distance:
        Issuer's trust distance from the root.
    proof:
        The review or flag proof itself.
    """

    identity: Identity
    distance: int
    proof: Proof


@dataclass(frozen=True)
class Verdict:
    """Result of verifying a package selector.

    The verdict reports evidence; acceptance thresholds are the caller's
    decision (see :meth:`meets`).

    Parameters
    ----------
    kind:
        The classification.
    selector:
        The package selector that was verified.
    evidence:
        Flagging proofs for ``FLAGGED``, reviews for ``TRUSTED``, empty for
        ``UNKNOWN``. Ordered by distance then identity id.
    """

    kind: VerdictKind
    selector: CrateSelector
    evidence: tuple[Evidence, ...] = field(default_factory=tuple)

    @property
    def is_trusted(self) -> bool:
        return self.kind is VerdictKind.TRUSTED

    @property
    def is_flagged(self) -> bool:
        return self.kind is VerdictKind.FLAGGED

    @property
    def is_unknown(self) -> bool:
        return self.kind is VerdictKind.UNKNOWN

    @property
    def identities(self) -> list[Identity]:
        """Issuers backing this verdict, closest first."""
        return [item.identity for item in self.evidence]

    @property
    def closest_distance(self) -> int | None:
        return self.evidence[0].distance if self.evidence else None

    def meets(self, min_reviews: int = 1, max_distance: int | None = None) -> bool:
        """Apply a caller-side acceptance threshold.

        Returns True only for a ``TRUSTED`` verdict with at least
        *min_reviews* reviewers at or below *max_distance*.
        """
        if not self.is_trusted:
            return False
        qualifying = [
            item
            for item in self.evidence
            if max_distance is None or item.distance <= max_distance
        ]
        return len(qualifying) >= min_reviews

    def to_dict(self) -> dict[str, object]:
        """Serialize to a plain dictionary."""
        return {
            "selector": str(self.selector),
            "verdict": self.kind.value,
            "evidence": [
                {
                    "id": item.identity.id,
                    "name": item.identity.display_name,
                    "distance": item.distance,
                    "kind": item.proof.kind.value,
                    "crate": str(item.proof.crate),
                    "date": item.proof.date.isoformat(),
                }
                for item in self.evidence
            ],
        }
