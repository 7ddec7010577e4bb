"""ProofSigner — issues signed proofs from a local Ed25519 key."""
from __future__ import annotations

import base64
import datetime
from collections.abc import Callable

from crev_trust.crypto.keys import Ed25519KeyManager
from crev_trust.identity import Identity
from crev_trust.proofs.levels import TrustLevel
from crev_trust.proofs.proof import Proof
from crev_trust.proofs.review import ReviewOutcome
from crev_trust.proofs.selector import CrateSelector


class ProofSigner:
    """Creates proofs issued and signed by one identity.

    Parameters
    ----------
    private_key:
        32-byte raw Ed25519 private key.
    display_name:
        Optional name attached to the issuer identity.
    clock:
        Callable returning the current UTC time. Defaults to the system clock.
    """

    def __init__(
        self,
        private_key: bytes,
        display_name: str | None = None,
        clock: Callable[[], datetime.datetime] | None = None,
    ) -> None:
        self._key_manager = Ed25519KeyManager()
        self._private_key = private_key
        self._clock = clock if clock is not None else (
            lambda: datetime.datetime.now(datetime.timezone.utc)
        )
        public_key = self._key_manager.public_key_from_private(private_key)
        self._identity = Identity.from_public_key(public_key, display_name=display_name)

    @classmethod
    def generate(cls, display_name: str | None = None) -> "ProofSigner":
        """Create a signer with a freshly generated keypair."""
        private_key, _ = Ed25519KeyManager().generate_keypair()
        return cls(private_key, display_name=display_name)

    @property
    def identity(self) -> Identity:
        return self._identity

    @property
    def private_key(self) -> bytes:
        return self._private_key

    # ------------------------------------------------------------------
    # Signing
    # ------------------------------------------------------------------

    def sign(self, proof: Proof) -> Proof:
        """Sign *proof*, which must be issued by this signer's identity."""
        if proof.issuer != self._identity:
            raise ValueError(
                f"Cannot sign a proof issued by {proof.issuer.id!r} "
                f"with the key of {self._identity.id!r}."
            )
        raw = self._key_manager.sign(self._private_key, proof.payload_bytes())
        return proof.with_signature(base64.urlsafe_b64encode(raw).decode("ascii"))

    def trust(self, subject: Identity, level: TrustLevel = TrustLevel.MEDIUM) -> Proof:
        return self.sign(Proof.trust(self._identity, subject, level, date=self._clock()))

    def distrust(self, subject: Identity) -> Proof:
        return self.sign(Proof.distrust(self._identity, subject, date=self._clock()))

    def review(self, crate: CrateSelector, outcome: ReviewOutcome | None = None) -> Proof:
        return self.sign(Proof.review(self._identity, crate, outcome, date=self._clock()))

    def flag(self, crate: CrateSelector, comment: str = "") -> Proof:
        return self.sign(Proof.flag(self._identity, crate, comment, date=self._clock()))
