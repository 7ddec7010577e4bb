"""Signature verification capability.

The proof store never touches key material directly. It is handed a
:class:`SignatureVerifier` and asks it whether a proof's signature is valid
for the issuer's public key. Production code uses
:class:`Ed25519SignatureVerifier`; tests may supply any object with a
matching ``verify_signature`` method.
"""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from crev_trust.crypto.keys import Ed25519KeyManager


@runtime_checkable
class SignatureVerifier(Protocol):
    """Checks a detached signature over a payload."""

    def verify_signature(
        self, payload: bytes, signature: bytes, public_key: bytes
    ) -> bool:
        """Return True if *signature* over *payload* was made by *public_key*."""
        ...


class Ed25519SignatureVerifier:
    """SignatureVerifier backed by Ed25519 via the ``cryptography`` package."""

    def __init__(self, key_manager: Ed25519KeyManager | None = None) -> None:
        self._key_manager = key_manager if key_manager is not None else Ed25519KeyManager()

    def verify_signature(
        self, payload: bytes, signature: bytes, public_key: bytes
    ) -> bool:
        if len(public_key) != 32 or len(signature) != 64:
            return False
        return self._key_manager.verify(public_key, signature, payload)


__all__ = ["Ed25519SignatureVerifier", "SignatureVerifier"]
