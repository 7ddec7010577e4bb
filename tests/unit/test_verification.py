"""Tests for crev_trust.verification — verify and Verdict."""
from __future__ import annotations

import datetime

import pytest

from crev_trust.crypto.signature import Ed25519SignatureVerifier
from crev_trust.proofs.levels import Rating, TrustLevel
from crev_trust.proofs.proof import Proof
from crev_trust.proofs.review import ReviewOutcome
from crev_trust.proofs.selector import CrateSelector
from crev_trust.proofs.signer import ProofSigner
from crev_trust.store.proof_store import ProofStore
from crev_trust.trust.distance import TrustDistances, compute_distances
from crev_trust.trust.graph import build_graph
from crev_trust.trust.params import TrustDistanceParams
from crev_trust.verification import VerdictKind, verify, verify_many

NOW = datetime.datetime(2024, 6, 1, tzinfo=datetime.timezone.utc)
EARLIER = NOW - datetime.timedelta(days=1)

FOO = CrateSelector("foo", "1.0")


class Network:
    """A root identity plus helpers to issue proofs into one store."""

    def __init__(self) -> None:
        self.store = ProofStore(Ed25519SignatureVerifier(), clock=lambda: NOW)
        self.root = ProofSigner.generate("root")

    def signer(self, name: str) -> ProofSigner:
        return ProofSigner.generate(name)

    def trust(self, source: ProofSigner, target: ProofSigner, level: TrustLevel) -> None:
        self.store.add(
            source.sign(Proof.trust(source.identity, target.identity, level, date=EARLIER))
        )

    def distrust(self, source: ProofSigner, target: ProofSigner) -> None:
        self.store.add(source.sign(Proof.distrust(source.identity, target.identity, date=EARLIER)))

    def review(
        self,
        signer: ProofSigner,
        crate: CrateSelector,
        rating: Rating = Rating.POSITIVE,
    ) -> None:
        outcome = ReviewOutcome(rating=rating)
        self.store.add(signer.sign(Proof.review(signer.identity, crate, outcome, date=EARLIER)))

    def flag(self, signer: ProofSigner, crate: CrateSelector) -> None:
        self.store.add(signer.sign(Proof.flag(signer.identity, crate, "bad", date=EARLIER)))

    def distances(self, max_distance: int = 10) -> TrustDistances:
        return compute_distances(
            build_graph(self.store),
            self.root.identity,
            TrustDistanceParams(max_distance=max_distance),
        )


@pytest.fixture()
def net() -> Network:
    return Network()


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


class TestClassification:
    def test_unknown_without_proofs(self, net: Network) -> None:
        verdict = verify(FOO, net.store, net.distances())
        assert verdict.kind is VerdictKind.UNKNOWN
        assert verdict.evidence == ()
        assert verdict.closest_distance is None

    def test_trusted_review(self, net: Network) -> None:
        alice = net.signer("alice")
        net.trust(net.root, alice, TrustLevel.MEDIUM)
        net.review(alice, FOO)
        verdict = verify(FOO, net.store, net.distances())
        assert verdict.is_trusted
        assert verdict.identities == [alice.identity]
        assert verdict.closest_distance == 1

    def test_own_review_counts(self, net: Network) -> None:
        net.review(net.root, FOO)
        verdict = verify(FOO, net.store, net.distances())
        assert verdict.is_trusted
        assert verdict.closest_distance == 0

    def test_review_from_untrusted_identity_ignored(self, net: Network) -> None:
        net.review(net.signer("stranger"), FOO)
        assert verify(FOO, net.store, net.distances()).is_unknown

    def test_one_flag_beats_many_reviews(self, net: Network) -> None:
        reviewers = [net.signer(f"r{i}") for i in range(10)]
        for reviewer in reviewers:
            net.trust(net.root, reviewer, TrustLevel.HIGH)
            net.review(reviewer, FOO)
        flagger = net.signer("flagger")
        net.trust(net.root, flagger, TrustLevel.MEDIUM)
        net.flag(flagger, FOO)

        verdict = verify(FOO, net.store, net.distances())
        assert verdict.is_flagged
        assert verdict.identities == [flagger.identity]

    def test_flag_outside_budget_ignored(self, net: Network) -> None:
        friend = net.signer("friend")
        far = net.signer("far")
        net.trust(net.root, friend, TrustLevel.HIGH)
        net.trust(net.root, far, TrustLevel.LOW)
        net.review(friend, FOO)
        net.flag(far, FOO)
        assert verify(FOO, net.store, net.distances(max_distance=3)).is_trusted
        assert verify(FOO, net.store, net.distances(max_distance=5)).is_flagged

    def test_negative_review_counts_as_flag(self, net: Network) -> None:
        alice = net.signer("alice")
        net.trust(net.root, alice, TrustLevel.HIGH)
        net.review(alice, FOO, Rating.NEGATIVE)
        assert verify(FOO, net.store, net.distances()).is_flagged

    def test_distrusted_reviewer_is_unknown(self, net: Network) -> None:
        a = net.signer("a")
        c = net.signer("c")
        b = net.signer("b")
        net.trust(net.root, a, TrustLevel.HIGH)
        net.trust(a, c, TrustLevel.HIGH)
        net.trust(c, b, TrustLevel.HIGH)
        net.distrust(a, b)
        net.review(b, FOO)
        assert verify(FOO, net.store, net.distances()).is_unknown

    def test_flag_on_other_version_does_not_apply(self, net: Network) -> None:
        alice = net.signer("alice")
        net.trust(net.root, alice, TrustLevel.HIGH)
        net.review(alice, CrateSelector("bar", "1.0"))
        net.flag(alice, CrateSelector("bar", "2.0"))

        results = verify_many(
            [CrateSelector("bar", "1.0"), CrateSelector("bar", "2.0")],
            net.store,
            net.distances(),
        )
        assert results[CrateSelector("bar", "1.0")].is_trusted
        assert results[CrateSelector("bar", "2.0")].is_flagged

    def test_flag_for_all_versions_applies_to_each(self, net: Network) -> None:
        alice = net.signer("alice")
        net.trust(net.root, alice, TrustLevel.HIGH)
        net.flag(alice, CrateSelector("bar"))
        assert verify(CrateSelector("bar", "3.1"), net.store, net.distances()).is_flagged


# ---------------------------------------------------------------------------
# Verdict helpers
# ---------------------------------------------------------------------------


class TestVerdict:
    def test_evidence_ordered_by_distance(self, net: Network) -> None:
        near = net.signer("near")
        far = net.signer("far")
        net.trust(net.root, far, TrustLevel.LOW)
        net.trust(net.root, near, TrustLevel.HIGH)
        net.review(far, FOO)
        net.review(near, FOO)
        verdict = verify(FOO, net.store, net.distances())
        assert [item.distance for item in verdict.evidence] == [0, 5]

    def test_meets_thresholds(self, net: Network) -> None:
        near = net.signer("near")
        far = net.signer("far")
        net.trust(net.root, near, TrustLevel.HIGH)
        net.trust(net.root, far, TrustLevel.LOW)
        net.review(near, FOO)
        net.review(far, FOO)
        verdict = verify(FOO, net.store, net.distances())
        assert verdict.meets(min_reviews=2)
        assert not verdict.meets(min_reviews=2, max_distance=1)
        assert verdict.meets(min_reviews=1, max_distance=1)

    def test_flagged_never_meets(self, net: Network) -> None:
        net.flag(net.root, FOO)
        assert not verify(FOO, net.store, net.distances()).meets(min_reviews=0)

    def test_to_dict(self, net: Network) -> None:
        net.review(net.root, FOO)
        data = verify(FOO, net.store, net.distances()).to_dict()
        assert data["selector"] == "foo@1.0"
        assert data["verdict"] == "trusted"
        assert data["evidence"][0]["distance"] == 0
