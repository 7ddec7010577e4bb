"""TrustDistanceParams — cost model and search budget for trust distances.

Higher declared trust maps to a lower traversal cost. The search budget
``max_distance`` bounds the cumulative cost of a path, not its hop count.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from crev_trust.proofs.levels import TrustLevel


class TrustDistanceParams(BaseModel):
    """Configurable trust distance parameters.

    Parameters
    ----------
    max_distance:
        Largest cumulative path cost still considered reachable.
    high_cost:
        Cost of traversing a ``HIGH`` trust edge.
    medium_cost:
        Cost of traversing a ``MEDIUM`` trust edge.
    low_cost:
        Cost of traversing a ``LOW`` trust edge.
    """

    model_config = ConfigDict(frozen=True)

    max_distance: int = Field(default=10, ge=0)
    high_cost: int = Field(default=0, ge=0)
    medium_cost: int = Field(default=1, ge=0)
    low_cost: int = Field(default=5, ge=0)

    @classmethod
    def from_depth(
        cls,
        depth: int = 10,
        high_cost: int = 0,
        medium_cost: int = 1,
        low_cost: int = 5,
    ) -> "TrustDistanceParams":
        """Build parameters from the command-line option names."""
        return cls(
            max_distance=depth,
            high_cost=high_cost,
            medium_cost=medium_cost,
            low_cost=low_cost,
        )

    def cost(self, level: TrustLevel) -> int:
        """Return the traversal cost for an edge of the given trust level."""
        if level is TrustLevel.HIGH:
            return self.high_cost
        if level is TrustLevel.MEDIUM:
            return self.medium_cost
        if level is TrustLevel.LOW:
            return self.low_cost
        raise ValueError(f"Unknown trust level {level!r}")
