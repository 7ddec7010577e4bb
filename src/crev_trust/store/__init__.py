"""Proof storage — verified in-memory store and local proof log."""
from __future__ import annotations

from crev_trust.store.proof_store import (
    AddStatus,
    ProofRejectedError,
    ProofStore,
    ProofStoreSnapshot,
    RejectReason,
)
from crev_trust.store.repository import (
    JsonlProofRepository,
    ProofRepository,
    UndecodableLine,
)

__all__ = [
    "AddStatus",
    "JsonlProofRepository",
    "ProofRejectedError",
    "ProofRepository",
    "ProofStore",
    "ProofStoreSnapshot",
    "RejectReason",
    "UndecodableLine",
]
