"""Identity — stable identifier for a proof issuer.

An identity is keyed by its ``id``. For real identities the id is the
unpadded base64url encoding of the issuer's 32-byte Ed25519 public key, so
the verifying key can always be recovered from the id alone. The optional
display name is informational and does not take part in equality.
"""
from __future__ import annotations

import base64
from dataclasses import dataclass, field


@dataclass(frozen=True, order=True)
class Identity:
    """A cryptographically-identified participant that issues proofs.

    Parameters
    ----------
    id:
        Public key fingerprint (base64url, no padding).
    display_name:
        Optional human-readable name. Ignored for equality, hashing and
        ordering.
    """

    id: str
    display_name: str | None = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Identity id must be a non-empty string.")

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @classmethod
    def from_public_key(
        cls, public_key: bytes, display_name: str | None = None
    ) -> "Identity":
        """Build an identity from raw Ed25519 public key bytes."""
        encoded = base64.urlsafe_b64encode(public_key).decode("ascii").rstrip("=")
        return cls(id=encoded, display_name=display_name)

    # ------------------------------------------------------------------
    # Key access
    # ------------------------------------------------------------------

    def public_key_bytes(self) -> bytes:
        """Decode the id back into raw public key bytes.

        Raises
        ------
        ValueError
            If the id is not a base64url encoding of a 32-byte key.
        """
        padded = self.id + "=" * (-len(self.id) % 4)
        try:
            raw = base64.urlsafe_b64decode(padded.encode("ascii"))
        except (ValueError, UnicodeEncodeError) as exc:
            raise ValueError(f"Identity {self.id!r} is not a valid key encoding: {exc}") from exc
        if len(raw) != 32:
            raise ValueError(
                f"Identity {self.id!r} decodes to {len(raw)} bytes, expected 32."
            )
        return raw

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, object]:
        """Serialize to a plain dictionary."""
        data: dict[str, object] = {"id": self.id}
        if self.display_name:
            data["display_name"] = self.display_name
        return data

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "Identity":
        """Reconstruct an Identity from :meth:`to_dict` output."""
        display_name = data.get("display_name")
        return cls(
            id=str(data["id"]),
            display_name=str(display_name) if display_name else None,
        )

    def label(self) -> str:
        """Return ``display_name`` when set, otherwise the id."""
        return self.display_name or self.id

    def __str__(self) -> str:
        return self.id
