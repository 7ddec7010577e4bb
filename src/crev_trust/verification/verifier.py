"""Package verification — combine trust distances with reviews and flags.

Policy, in order:

1. collect effective review and flag proofs matching the selector;
2. drop proofs whose issuer is absent from the distance table;
3. any remaining flag (or negative review) makes the verdict ``FLAGGED``;
4. otherwise any remaining review makes it ``TRUSTED``;
5. otherwise it is ``UNKNOWN``.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Protocol

from crev_trust.identity import Identity
from crev_trust.proofs.proof import Proof, ProofKind
from crev_trust.proofs.selector import CrateSelector
from crev_trust.verification.verdict import Evidence, Verdict, VerdictKind


class SupportsProofsAbout(Protocol):
    def proofs_about(self, selector: CrateSelector) -> list[Proof]: ...


def _is_flag(proof: Proof) -> bool:
    kind = proof.kind
    if kind is ProofKind.FLAG:
        return True
    if kind is ProofKind.REVIEW:
        assert proof.outcome is not None
        return proof.outcome.is_negative
    raise ValueError(f"Proof kind {kind!r} carries no package opinion")


def verify(
    selector: CrateSelector,
    store: SupportsProofsAbout,
    distances: Mapping[Identity, int],
) -> Verdict:
    """Derive a verdict for *selector*.

    Parameters
    ----------
    selector:
        Package name/version to verify.
    store:
        Proof store or snapshot supplying review and flag proofs.
    distances:
        Trust distance table from the root identity.

    Returns
    -------
    Verdict
    """
    flags: list[Evidence] = []
    reviews: list[Evidence] = []
    for proof in store.proofs_about(selector):
        distance = distances.get(proof.issuer)
        if distance is None:
            continue
        evidence = Evidence(identity=proof.issuer, distance=distance, proof=proof)
        if _is_flag(proof):
            flags.append(evidence)
        else:
            reviews.append(evidence)

    if flags:
        return Verdict(VerdictKind.FLAGGED, selector, _ordered(flags))
    if reviews:
        return Verdict(VerdictKind.TRUSTED, selector, _ordered(reviews))
    return Verdict(VerdictKind.UNKNOWN, selector)


def verify_many(
    selectors: Iterable[CrateSelector],
    store: SupportsProofsAbout,
    distances: Mapping[Identity, int],
) -> dict[CrateSelector, Verdict]:
    """Verify several selectors against the same distance table."""
    return {selector: verify(selector, store, distances) for selector in selectors}


def _ordered(items: list[Evidence]) -> tuple[Evidence, ...]:
    return tuple(
        sorted(items, key=lambda e: (e.distance, e.identity.id, e.proof.date, e.proof.digest))
    )
