"""Trust graph construction and trust distance computation.

Trust proofs form a directed graph whose edges cost less the more they are
trusted. The distance from the local root identity to another identity is
the cheapest path cost, bounded by ``TrustDistanceParams.max_distance``.
"""
from __future__ import annotations

from crev_trust.proofs.levels import TrustLevel, parse_trust_level
from crev_trust.trust.distance import TrustDistances, compute_distances
from crev_trust.trust.graph import TrustEdge, TrustGraph, build_graph
from crev_trust.trust.params import TrustDistanceParams

__all__ = [
    "TrustDistanceParams",
    "TrustDistances",
    "TrustEdge",
    "TrustGraph",
    "TrustLevel",
    "build_graph",
    "compute_distances",
    "parse_trust_level",
]
