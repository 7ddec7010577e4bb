"""Signature primitives used to verify and issue proofs.

Requires the ``cryptography`` package for the Ed25519 implementation.
"""
from __future__ import annotations

from crev_trust.crypto.keys import Ed25519KeyManager
from crev_trust.crypto.signature import Ed25519SignatureVerifier, SignatureVerifier

__all__ = [
    "Ed25519KeyManager",
    "Ed25519SignatureVerifier",
    "SignatureVerifier",
]
