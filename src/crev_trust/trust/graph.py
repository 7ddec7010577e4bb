"""TrustGraph — directed trust edges and distrust blocklist built from proofs.

The graph is a pure projection of the effective trust and distrust proofs
in a store. It is rebuilt for each verification run and never persisted.
Trust is directional: ``A -> B`` says nothing about ``B -> A``.
"""
from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import Protocol

from crev_trust.identity import Identity
from crev_trust.proofs.levels import TrustLevel
from crev_trust.proofs.proof import Proof, ProofKind
from crev_trust.trust.params import TrustDistanceParams


class SupportsEffectiveProofs(Protocol):
    def effective_proofs(self) -> list[Proof]: ...


@dataclass(frozen=True, order=True)
class TrustEdge:
    """A directed trust edge.

    Parameters
    ----------
    source:
        The trusting identity.
    target:
        The trusted identity.
    level:
        Declared trust level.
    """

    source: Identity
    target: Identity
    level: TrustLevel


class TrustGraph:
    """Directed graph of trust levels between identities plus distrust pairs.

    Parameters
    ----------
    source:
        The store or snapshot the graph was projected from, if any.
    """

    def __init__(self, source: SupportsEffectiveProofs | None = None) -> None:
        self._edges: dict[Identity, dict[Identity, TrustLevel]] = {}
        self._distrust: dict[Identity, set[Identity]] = {}
        self._nodes: set[Identity] = set()
        self.source = source

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_trust(self, source: Identity, target: Identity, level: TrustLevel) -> None:
        """Insert or overwrite the edge ``source -> target``."""
        self._nodes.update((source, target))
        self._edges.setdefault(source, {})[target] = level

    def add_distrust(self, source: Identity, target: Identity) -> None:
        """Record that *source* distrusts *target*."""
        self._nodes.update((source, target))
        self._distrust.setdefault(source, set()).add(target)

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    def nodes(self) -> list[Identity]:
        return sorted(self._nodes)

    def edges(self) -> list[TrustEdge]:
        return sorted(
            TrustEdge(source, target, level)
            for source, targets in self._edges.items()
            for target, level in targets.items()
        )

    def out_edges(self, node: Identity) -> list[tuple[Identity, TrustLevel]]:
        """Return ``(target, level)`` pairs leaving *node*, sorted by target id."""
        return sorted(self._edges.get(node, {}).items())

    def level(self, source: Identity, target: Identity) -> TrustLevel | None:
        return self._edges.get(source, {}).get(target)

    def weight(
        self, source: Identity, target: Identity, params: TrustDistanceParams
    ) -> int:
        """Return the cost of the edge ``source -> target``.

        Raises
        ------
        KeyError
            If there is no such edge.
        """
        level = self.level(source, target)
        if level is None:
            raise KeyError(f"No trust edge from {source.id!r} to {target.id!r}.")
        return params.cost(level)

    def distrusted_by(self, node: Identity) -> frozenset[Identity]:
        return frozenset(self._distrust.get(node, ()))

    def is_distrusted(self, source: Identity, target: Identity) -> bool:
        return target in self._distrust.get(source, ())

    def distrust_pairs(self) -> list[tuple[Identity, Identity]]:
        return sorted(
            (source, target)
            for source, targets in self._distrust.items()
            for target in targets
        )

    def __contains__(self, node: object) -> bool:
        return node in self._nodes

    def __iter__(self) -> Iterator[Identity]:
        return iter(self.nodes())

    def __len__(self) -> int:
        return len(self._nodes)


def build_graph(store: SupportsEffectiveProofs) -> TrustGraph:
    """Build a TrustGraph from the effective proofs of a store or snapshot.

    Trust proofs become edges, distrust proofs become blocklist entries,
    review and flag proofs are ignored. Proofs an identity issues about
    itself carry no information and are skipped.
    """
    graph = TrustGraph(source=store)
    for proof in store.effective_proofs():
        kind = proof.kind
        if kind is ProofKind.TRUST:
            assert proof.subject is not None and proof.level is not None
            if proof.subject != proof.issuer:
                graph.add_trust(proof.issuer, proof.subject, proof.level)
        elif kind is ProofKind.DISTRUST:
            assert proof.subject is not None
            if proof.subject != proof.issuer:
                graph.add_distrust(proof.issuer, proof.subject)
        elif kind is ProofKind.REVIEW or kind is ProofKind.FLAG:
            continue
        else:
            raise ValueError(f"Unhandled proof kind {kind!r}")
    return graph
