#!/usr/bin/env python3
"""Example: Distrust along a path

Shows how a distrust proof removes an identity from the trust graph for
every path that runs through the distrusting identity, and how a root
distrust vetoes an identity outright.

Usage:
    python examples/02_distrust.py
"""
from __future__ import annotations

from crev_trust import (
    CrateSelector,
    Ed25519SignatureVerifier,
    ProofSigner,
    TrustEngine,
    TrustLevel,
)


def main() -> None:
    me = ProofSigner.generate("me")
    alice = ProofSigner.generate("alice")
    bob = ProofSigner.generate("bob")
    carol = ProofSigner.generate("carol")
    dave = ProofSigner.generate("dave")
    crate = CrateSelector("left-pad", "1.3.0")

    engine = TrustEngine(root=me.identity, verifier=Ed25519SignatureVerifier())
    engine.ingest(
        [
            me.trust(alice.identity, TrustLevel.HIGH),
            alice.trust(bob.identity, TrustLevel.MEDIUM),
            bob.trust(carol.identity, TrustLevel.MEDIUM),
            carol.review(crate),
        ]
    )
    print(f"Before distrust: {engine.verify(crate).kind.value}")

    # Alice distrusts Carol: the only path to Carol runs through Alice.
    engine.ingest([alice.distrust(carol.identity)])
    print(f"Alice distrusts Carol: {engine.verify(crate).kind.value}")
    print("Reachable:", ", ".join(i.label() for i in engine.compute_trust()))

    # A second route that avoids Alice restores Carol until the root vetoes Carol directly.
    engine.ingest(
        [me.trust(dave.identity, TrustLevel.MEDIUM), dave.trust(carol.identity, TrustLevel.MEDIUM)]
    )
    print(f"Route via Dave: {engine.verify(crate).kind.value}")
    engine.ingest([me.distrust(carol.identity)])
    print(f"Root distrusts Carol: {engine.verify(crate).kind.value}")


if __name__ == "__main__":
    main()
