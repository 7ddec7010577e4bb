"""crev-trust — Trust graph distance and proof verification for code reviews.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import crev_trust
>>> crev_trust.__version__
'0.1.0'

Quick start
-----------
::

    from crev_trust import (
        CrateSelector, Ed25519SignatureVerifier, ProofSigner,
        TrustDistanceParams, TrustEngine, TrustLevel,
    )

    me = ProofSigner.generate("me")
    alice = ProofSigner.generate("alice")

    engine = TrustEngine(root=me.identity, verifier=Ed25519SignatureVerifier())
    engine.ingest([
        me.trust(alice.identity, TrustLevel.HIGH),
        alice.review(CrateSelector("serde", "1.0.0")),
    ])
    distances = engine.compute_trust(TrustDistanceParams(max_distance=5))
    print(engine.verify(CrateSelector("serde", "1.0.0"), distances).kind)
"""
from __future__ import annotations

__version__: str = "0.1.0"

from crev_trust.identity import Identity

# ------------------------------------------------------------------
# Proofs and signatures
# ------------------------------------------------------------------
from crev_trust.crypto import Ed25519KeyManager, Ed25519SignatureVerifier, SignatureVerifier
from crev_trust.proofs import (
    CrateSelector,
    MalformedProofError,
    Proof,
    ProofKind,
    ProofSigner,
    Rating,
    ReviewLevel,
    ReviewOutcome,
    TrustLevel,
    parse_trust_level,
)

# ------------------------------------------------------------------
# Storage and sources
# ------------------------------------------------------------------
from crev_trust.sources import FetchResult, FileProofSource, ProofSource, ProofSourceError, fetch_all
from crev_trust.store import (
    AddStatus,
    JsonlProofRepository,
    ProofRejectedError,
    ProofRepository,
    ProofStore,
    ProofStoreSnapshot,
    RejectReason,
    UndecodableLine,
)

# ------------------------------------------------------------------
# Trust graph and distances
# ------------------------------------------------------------------
from crev_trust.trust import (
    TrustDistanceParams,
    TrustDistances,
    TrustEdge,
    TrustGraph,
    build_graph,
    compute_distances,
)

# ------------------------------------------------------------------
# Verification
# ------------------------------------------------------------------
from crev_trust.verification import Evidence, Verdict, VerdictKind, verify, verify_many
from crev_trust.engine import IngestReport, Rejection, RootIdentityError, TrustEngine

__all__ = [
    # version
    "__version__",
    "Identity",
    # proofs and signatures
    "CrateSelector",
    "Ed25519KeyManager",
    "Ed25519SignatureVerifier",
    "MalformedProofError",
    "Proof",
    "ProofKind",
    "ProofSigner",
    "Rating",
    "ReviewLevel",
    "ReviewOutcome",
    "SignatureVerifier",
    "TrustLevel",
    "parse_trust_level",
    # storage and sources
    "AddStatus",
    "FetchResult",
    "FileProofSource",
    "JsonlProofRepository",
    "ProofRejectedError",
    "ProofRepository",
    "ProofSource",
    "ProofSourceError",
    "ProofStore",
    "ProofStoreSnapshot",
    "RejectReason",
    "UndecodableLine",
    "fetch_all",
    # trust
    "TrustDistanceParams",
    "TrustDistances",
    "TrustEdge",
    "TrustGraph",
    "build_graph",
    "compute_distances",
    # verification
    "Evidence",
    "IngestReport",
    "Rejection",
    "RootIdentityError",
    "TrustEngine",
    "Verdict",
    "VerdictKind",
    "verify",
    "verify_many",
]
