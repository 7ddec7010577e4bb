"""Proof — a signed statement issued by an identity.

A proof is a single tagged record: ``kind`` selects which of the optional
fields are meaningful.

========  ===============================================
kind      fields
========  ===============================================
trust     ``subject`` (Identity), ``level`` (TrustLevel)
distrust  ``subject`` (Identity)
review    ``crate`` (CrateSelector), ``outcome``
flag      ``crate`` (CrateSelector), ``comment``
========  ===============================================

The signable payload is a deterministic JSON serialization of every field
except the signature. Signatures are base64url-encoded.
"""
from __future__ import annotations

import base64
import datetime
import hashlib
import json
from dataclasses import dataclass, replace
from enum import Enum

from crev_trust.identity import Identity
from crev_trust.proofs.levels import TrustLevel, parse_trust_level
from crev_trust.proofs.review import ReviewOutcome
from crev_trust.proofs.selector import CrateSelector


class MalformedProofError(ValueError):
    """Raised when a proof record cannot be parsed or is internally inconsistent."""


class ProofKind(str, Enum):
    """Discriminator for the four proof variants."""

    TRUST = "trust"
    DISTRUST = "distrust"
    REVIEW = "review"
    FLAG = "flag"


IDENTITY_KINDS: frozenset[ProofKind] = frozenset({ProofKind.TRUST, ProofKind.DISTRUST})
PACKAGE_KINDS: frozenset[ProofKind] = frozenset({ProofKind.REVIEW, ProofKind.FLAG})


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


@dataclass(frozen=True)
class Proof:
    """An immutable signed statement.

    Use the ``trust``/``distrust``/``review``/``flag`` factories rather than
    the constructor; they fill in only the fields the kind allows.

    Parameters
    ----------
    kind:
        Which variant this proof is.
    issuer:
        The identity that made the statement.
    date:
        When the statement was made. Naive datetimes are taken as UTC.
    subject:
        Target identity for trust and distrust proofs.
    level:
        Trust level for trust proofs.
    crate:
        Target package for review and flag proofs. Must carry a name.
    outcome:
        Review content for review proofs.
    comment:
        Optional note on a flag.
    signature:
        Base64url signature over :meth:`payload_bytes`. Empty until signed.
    """

    kind: ProofKind
    issuer: Identity
    date: datetime.datetime
    subject: Identity | None = None
    level: TrustLevel | None = None
    crate: CrateSelector | None = None
    outcome: ReviewOutcome | None = None
    comment: str = ""
    signature: str = ""

    def __post_init__(self) -> None:
        if self.date.tzinfo is None:
            object.__setattr__(self, "date", self.date.replace(tzinfo=datetime.timezone.utc))
        self._validate()

    def _validate(self) -> None:
        kind = self.kind
        if kind in IDENTITY_KINDS:
            if self.subject is None:
                raise MalformedProofError(f"A {kind.value} proof requires a subject identity.")
            if self.crate is not None or self.outcome is not None:
                raise MalformedProofError(f"A {kind.value} proof cannot carry crate fields.")
            if kind is ProofKind.TRUST and self.level is None:
                raise MalformedProofError("A trust proof requires a trust level.")
            if kind is ProofKind.DISTRUST and self.level is not None:
                raise MalformedProofError("A distrust proof cannot carry a trust level.")
        elif kind in PACKAGE_KINDS:
            if self.crate is None or self.crate.name is None:
                raise MalformedProofError(f"A {kind.value} proof requires a crate name.")
            if self.subject is not None or self.level is not None:
                raise MalformedProofError(f"A {kind.value} proof cannot carry trust fields.")
            if kind is ProofKind.REVIEW and self.outcome is None:
                raise MalformedProofError("A review proof requires an outcome.")
            if kind is ProofKind.FLAG and self.outcome is not None:
                raise MalformedProofError("A flag proof cannot carry a review outcome.")
        else:
            raise MalformedProofError(f"Unknown proof kind {kind!r}.")

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def trust(
        cls,
        issuer: Identity,
        subject: Identity,
        level: TrustLevel = TrustLevel.MEDIUM,
        date: datetime.datetime | None = None,
    ) -> "Proof":
        return cls(
            kind=ProofKind.TRUST,
            issuer=issuer,
            date=date if date is not None else _utcnow(),
            subject=subject,
            level=level,
        )

    @classmethod
    def distrust(
        cls,
        issuer: Identity,
        subject: Identity,
        date: datetime.datetime | None = None,
    ) -> "Proof":
        return cls(
            kind=ProofKind.DISTRUST,
            issuer=issuer,
            date=date if date is not None else _utcnow(),
            subject=subject,
        )

    @classmethod
    def review(
        cls,
        issuer: Identity,
        crate: CrateSelector,
        outcome: ReviewOutcome | None = None,
        date: datetime.datetime | None = None,
    ) -> "Proof":
        return cls(
            kind=ProofKind.REVIEW,
            issuer=issuer,
            date=date if date is not None else _utcnow(),
            crate=crate,
            outcome=outcome if outcome is not None else ReviewOutcome(),
        )

    @classmethod
    def flag(
        cls,
        issuer: Identity,
        crate: CrateSelector,
        comment: str = "",
        date: datetime.datetime | None = None,
    ) -> "Proof":
        return cls(
            kind=ProofKind.FLAG,
            issuer=issuer,
            date=date if date is not None else _utcnow(),
            crate=crate,
            comment=comment,
        )

    def with_signature(self, signature: str) -> "Proof":
        """Return a copy of this proof carrying *signature*."""
        return replace(self, signature=signature)

    # ------------------------------------------------------------------
    # Keys
    # ------------------------------------------------------------------

    @property
    def subject_key(self) -> tuple[str, ...]:
        """Key under which a newer proof from the same issuer supersedes this one.

        Trust and distrust about the same identity share a key, as do review
        and flag of the same package version.
        """
        if self.kind in IDENTITY_KINDS:
            assert self.subject is not None
            return ("identity", self.issuer.id, self.subject.id)
        assert self.crate is not None and self.crate.name is not None
        return ("package", self.issuer.id, self.crate.name, self.crate.version or "*")

    @property
    def digest(self) -> str:
        """SHA-256 hex digest over the payload and signature."""
        hasher = hashlib.sha256(self.payload_bytes())
        hasher.update(self.signature.encode("utf-8"))
        return hasher.hexdigest()

    def signature_bytes(self) -> bytes:
        """Decode the base64url signature.

        Raises
        ------
        ValueError
            If the signature is empty or not valid base64url.
        """
        if not self.signature:
            raise ValueError("Proof is not signed.")
        padded = self.signature + "=" * (-len(self.signature) % 4)
        return base64.urlsafe_b64decode(padded.encode("ascii"))

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def _payload(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "kind": self.kind.value,
            "issuer": self.issuer.to_dict(),
            "date": self.date.isoformat(),
        }
        if self.subject is not None:
            payload["subject"] = self.subject.to_dict()
        if self.level is not None:
            payload["level"] = self.level.label
        if self.crate is not None:
            payload["crate"] = self.crate.to_dict()
        if self.outcome is not None:
            payload["outcome"] = self.outcome.to_dict()
        if self.comment:
            payload["comment"] = self.comment
        return payload

    def payload_bytes(self) -> bytes:
        """Produce a deterministic byte representation of the signable payload."""
        return json.dumps(
            self._payload(), sort_keys=True, separators=(",", ":")
        ).encode("utf-8")

    def to_dict(self) -> dict[str, object]:
        """Serialize proof to a plain dictionary."""
        data = self._payload()
        data["signature"] = self.signature
        return data

    @classmethod
    def from_dict(cls, data: object) -> "Proof":
        """Reconstruct a Proof from a plain dictionary.

        Raises
        ------
        MalformedProofError
            If *data* is not a mapping or any field is missing or invalid.
        """
        if not isinstance(data, dict):
            raise MalformedProofError(
                f"Proof record must be an object, got {type(data).__name__}."
            )
        try:
            kind = ProofKind(str(data["kind"]))
            subject = data.get("subject")
            level = data.get("level")
            crate = data.get("crate")
            outcome = data.get("outcome")
            return cls(
                kind=kind,
                issuer=Identity.from_dict(data["issuer"]),  # type: ignore[arg-type]
                date=datetime.datetime.fromisoformat(str(data["date"])),
                subject=Identity.from_dict(subject) if subject is not None else None,  # type: ignore[arg-type]
                level=parse_trust_level(str(level)) if level is not None else None,
                crate=CrateSelector.from_dict(crate) if crate is not None else None,  # type: ignore[arg-type]
                outcome=ReviewOutcome.from_dict(outcome) if outcome is not None else None,  # type: ignore[arg-type]
                comment=str(data.get("comment") or ""),
                signature=str(data.get("signature") or ""),
            )
        except MalformedProofError:
            raise
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise MalformedProofError(f"Invalid proof record: {exc!r}") from exc

    def describe(self) -> str:
        """One-line human-readable summary."""
        issuer = self.issuer.label()
        if self.kind is ProofKind.TRUST:
            assert self.level is not None
            return f"{issuer} trusts {self.subject} ({self.level.label})"
        if self.kind is ProofKind.DISTRUST:
            return f"{issuer} distrusts {self.subject}"
        if self.kind is ProofKind.REVIEW:
            assert self.outcome is not None
            return f"{issuer} reviewed {self.crate} ({self.outcome.rating.value})"
        return f"{issuer} flagged {self.crate}"
