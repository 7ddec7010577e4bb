"""Package verification against a trust distance table."""
from __future__ import annotations

from crev_trust.verification.verdict import Evidence, Verdict, VerdictKind
from crev_trust.verification.verifier import verify, verify_many

__all__ = [
    "Evidence",
    "Verdict",
    "VerdictKind",
    "verify",
    "verify_many",
]
