#!/usr/bin/env python3
"""Example: Quickstart

Creates three identities, has the local one trust a reviewer, and checks
a crate against the resulting trust graph.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install crev-trust
"""
from __future__ import annotations

import crev_trust
from crev_trust import (
    CrateSelector,
    Ed25519SignatureVerifier,
    ProofSigner,
    TrustDistanceParams,
    TrustEngine,
    TrustLevel,
)


def main() -> None:
    print(f"crev-trust version: {crev_trust.__version__}")

    # Step 1: Local identity and two reviewers
    me = ProofSigner.generate("me")
    alice = ProofSigner.generate("alice")
    stranger = ProofSigner.generate("stranger")

    # Step 2: Collect proofs
    engine = TrustEngine(root=me.identity, verifier=Ed25519SignatureVerifier())
    report = engine.ingest(
        [
            me.trust(alice.identity, TrustLevel.HIGH),
            alice.review(CrateSelector("serde", "1.0.0")),
            stranger.flag(CrateSelector("serde", "1.0.0"), "unfounded"),
        ]
    )
    print(f"Accepted {report.accepted_count} proof(s)")

    # Step 3: Trust distances
    distances = engine.compute_trust(TrustDistanceParams(max_distance=5))
    for identity in distances:
        print(f"  {identity.label():<10} distance={distances[identity]}")

    # Step 4: Verify. The stranger's flag is ignored: it is outside the graph.
    verdict = engine.verify(CrateSelector("serde", "1.0.0"), distances)
    print(f"serde@1.0.0: {verdict.kind.value}")

    print("\nQuickstart complete.")


if __name__ == "__main__":
    main()
