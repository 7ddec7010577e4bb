"""Ed25519KeyManager — the key operations behind identities and proof signatures.

An identity is the unpadded base64url form of a 32-byte Ed25519 public
key, and every proof carries an Ed25519 signature over its canonical
payload bytes. This module holds the raw-bytes operations those rely on:
creating a key for a new identity, recovering the public key (and hence
the identity id) from a stored private key, signing a proof payload, and
checking a signature against the issuer's public key.
"""
from __future__ import annotations

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from cryptography.hazmat.primitives.serialization import (
    Encoding,
    NoEncryption,
    PrivateFormat,
    PublicFormat,
)


class Ed25519KeyManager:
    """Raw Ed25519 operations used by :class:`~crev_trust.proofs.ProofSigner`
    and :class:`~crev_trust.crypto.Ed25519SignatureVerifier`.

    Example
    -------
    ::

        manager = Ed25519KeyManager()
        private_key, public_key = manager.generate_keypair()
        identity = Identity.from_public_key(public_key)
        signature = manager.sign(private_key, proof.payload_bytes())
        assert manager.verify(identity.public_key_bytes(), signature, proof.payload_bytes())
    """

    def generate_keypair(self) -> tuple[bytes, bytes]:
        """Create the key material for a new identity.

        Returns
        -------
        tuple[bytes, bytes]
            ``(private_key, public_key)``, 32 raw bytes each. The public key
            is what :meth:`Identity.from_public_key` encodes into an id.
        """
        private_key = Ed25519PrivateKey.generate()
        private_bytes = private_key.private_bytes(
            Encoding.Raw, PrivateFormat.Raw, NoEncryption()
        )
        public_bytes = private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)
        return private_bytes, public_bytes

    def public_key_from_private(self, private_key_bytes: bytes) -> bytes:
        """Recover the public key, and so the identity, of a stored private key."""
        private_key = Ed25519PrivateKey.from_private_bytes(private_key_bytes)
        return private_key.public_key().public_bytes(Encoding.Raw, PublicFormat.Raw)

    def sign(self, private_key_bytes: bytes, payload: bytes) -> bytes:
        """Sign a proof payload as the identity owning *private_key_bytes*.

        Parameters
        ----------
        private_key_bytes:
            The issuer's 32-byte raw private key.
        payload:
            Canonical payload bytes of the proof, see ``Proof.payload_bytes``.

        Returns
        -------
        bytes
            The 64-byte signature stored on the proof.
        """
        private_key = Ed25519PrivateKey.from_private_bytes(private_key_bytes)
        return private_key.sign(payload)

    def verify(self, public_key_bytes: bytes, signature: bytes, payload: bytes) -> bool:
        """Check that *signature* over *payload* was made by the issuer's key.

        Returns ``False`` for a forged or mismatched signature and for an
        issuer id that does not decode to a valid Ed25519 public key.
        """
        try:
            public_key = Ed25519PublicKey.from_public_bytes(public_key_bytes)
        except ValueError:
            return False
        try:
            public_key.verify(signature, payload)
            return True
        except InvalidSignature:
            return False


__all__ = ["Ed25519KeyManager"]
