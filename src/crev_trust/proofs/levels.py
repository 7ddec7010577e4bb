"""Enumerations carried inside proofs.

``TrustLevel`` qualifies a trust proof. ``Rating`` and ``ReviewLevel``
qualify a review. All serialize as their lower-case names.
"""
from __future__ import annotations

from enum import Enum, IntEnum


class TrustLevel(IntEnum):
    """Declared strength of a trust edge.

    Values are ordered so that higher integers represent higher trust.
    Absence of trust is modelled as the absence of an edge, not a level.
    """

    LOW = 1
    MEDIUM = 2
    HIGH = 3

    @property
    def label(self) -> str:
        return self.name.lower()


class Rating(str, Enum):
    """Overall verdict of a review."""

    NEGATIVE = "negative"
    NEUTRAL = "neutral"
    POSITIVE = "positive"
    STRONG = "strong"


class ReviewLevel(str, Enum):
    """Thoroughness or understanding declared by a reviewer."""

    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


def parse_trust_level(value: str | TrustLevel) -> TrustLevel:
    """Parse a trust level from its name (case-insensitive).

    Raises
    ------
    ValueError
        If *value* does not name a trust level.
    """
    if isinstance(value, TrustLevel):
        return value
    try:
        return TrustLevel[str(value).strip().upper()]
    except KeyError:
        valid = ", ".join(level.label for level in TrustLevel)
        raise ValueError(
            f"Unknown trust level {value!r}. Valid levels: {valid}"
        ) from None
