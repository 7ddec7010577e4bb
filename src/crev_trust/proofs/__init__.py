"""Proof model — signed trust, distrust, review, and flag statements.

Quick start
-----------
::

    from crev_trust.proofs import CrateSelector, ProofSigner, TrustLevel

    alice = ProofSigner.generate("alice")
    bob = ProofSigner.generate("bob")

    trust = alice.trust(bob.identity, TrustLevel.HIGH)
    review = bob.review(CrateSelector("serde", "1.0.0"))
"""
from __future__ import annotations

from crev_trust.proofs.levels import Rating, ReviewLevel, TrustLevel, parse_trust_level
from crev_trust.proofs.proof import MalformedProofError, Proof, ProofKind
from crev_trust.proofs.review import ReviewOutcome
from crev_trust.proofs.selector import CrateSelector
from crev_trust.proofs.signer import ProofSigner

__all__ = [
    "CrateSelector",
    "MalformedProofError",
    "Proof",
    "ProofKind",
    "ProofSigner",
    "Rating",
    "ReviewLevel",
    "ReviewOutcome",
    "TrustLevel",
    "parse_trust_level",
]
