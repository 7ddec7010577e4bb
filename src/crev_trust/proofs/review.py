"""ReviewOutcome — the content of a review proof."""
from __future__ import annotations

from dataclasses import dataclass

from crev_trust.proofs.levels import Rating, ReviewLevel


@dataclass(frozen=True)
class ReviewOutcome:
    """What a reviewer concluded about a package version.

    Parameters
    ----------
    rating:
        Overall judgement. A ``NEGATIVE`` rating is treated as a flag
        during verification.
    thoroughness:
        How carefully the code was read.
    understanding:
        How well the reviewer understood it.
    comment:
        Free-form notes.
    """

    rating: Rating = Rating.POSITIVE
    thoroughness: ReviewLevel = ReviewLevel.LOW
    understanding: ReviewLevel = ReviewLevel.MEDIUM
    comment: str = ""

    @property
    def is_negative(self) -> bool:
        return self.rating is Rating.NEGATIVE

    def to_dict(self) -> dict[str, object]:
        return {
            "rating": self.rating.value,
            "thoroughness": self.thoroughness.value,
            "understanding": self.understanding.value,
            "comment": self.comment,
        }

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> "ReviewOutcome":
        return cls(
            rating=Rating(str(data.get("rating", Rating.POSITIVE.value))),
            thoroughness=ReviewLevel(str(data.get("thoroughness", ReviewLevel.LOW.value))),
            understanding=ReviewLevel(
                str(data.get("understanding", ReviewLevel.MEDIUM.value))
            ),
            comment=str(data.get("comment") or ""),
        )
