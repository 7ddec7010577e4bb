"""Trust distance — minimal trust cost from the root identity to every other.

The search is Dijkstra's algorithm over the trust graph, with two
additions:

* **Path distrust.** A distrust proof issued by ``u`` blocks its target
  only on paths that run through ``u``. The search therefore expands
  labels rather than bare identities: a label is one path from the root
  together with the set of identities distrusted by anyone on it. An edge
  toward a member of that set is never relaxed. A label is dropped when an
  earlier label for the same identity, which cannot cost more, already
  blocks a subset of what it blocks. The first label finalized for an
  identity gives its distance and its path.
* **Root veto.** Anything the root distrusts is unreachable, whatever other
  paths exist.

Which identities are reachable, and at what cost, does not depend on how
identities are named. Heap entries are ordered by ``(cost, target id,
path ids from the predecessor back to the root)`` so the path chosen
between equally cheap routes is reproducible. Identities whose cost
exceeds ``max_distance`` are left out of the result.
"""
from __future__ import annotations

import heapq
import itertools
import logging
from collections.abc import Iterator, Mapping

from crev_trust.identity import Identity
from crev_trust.trust.graph import TrustGraph
from crev_trust.trust.params import TrustDistanceParams

logger = logging.getLogger(__name__)

# (cost, target id, path ids back to the root, sequence, target, path, blocked)
_Label = tuple[
    int, str, tuple[str, ...], int, Identity, tuple[Identity, ...], frozenset[Identity]
]


class TrustDistances(Mapping[Identity, int]):
    """Read-only trust distance table for one verification run.

    Lower values mean more trusted. Identities absent from the mapping have
    no sufficiently short trusted path and are treated as untrusted.

    Parameters
    ----------
    root:
        The identity distances are measured from.
    params:
        Parameters the table was computed with.
    distances:
        Finalized cost per identity.
    paths:
        Chosen path from the root to each identity, root first.
    source:
        The proof collection the graph was built from, if known. Verifying
        against it keeps reviews and trust edges from the same snapshot.
    """

    def __init__(
        self,
        root: Identity,
        params: TrustDistanceParams,
        distances: dict[Identity, int],
        paths: dict[Identity, tuple[Identity, ...]],
        source: object | None = None,
    ) -> None:
        self._root = root
        self._params = params
        self._distances = dict(distances)
        self._paths = dict(paths)
        self._source = source

    @property
    def root(self) -> Identity:
        return self._root

    @property
    def params(self) -> TrustDistanceParams:
        return self._params

    @property
    def source(self) -> object | None:
        return self._source

    def __getitem__(self, identity: Identity) -> int:
        return self._distances[identity]

    def __iter__(self) -> Iterator[Identity]:
        """Iterate identities from most to least trusted, ties by id."""
        return iter(sorted(self._distances, key=lambda i: (self._distances[i], i.id)))

    def __len__(self) -> int:
        return len(self._distances)

    def predecessor(self, identity: Identity) -> Identity | None:
        """Return the previous hop on the path to *identity* (None for the root)."""
        path = self._paths[identity]
        return path[-2] if len(path) > 1 else None

    def path_to(self, identity: Identity) -> list[Identity]:
        """Return the chosen path from the root to *identity*, root first.

        Raises
        ------
        KeyError
            If *identity* is not reachable.
        """
        if identity not in self._distances:
            raise KeyError(f"Identity {identity.id!r} is not within the trust budget.")
        return list(self._paths[identity])

    def as_dict(self) -> dict[str, int]:
        """Return ``{identity id: distance}`` in iteration order."""
        return {identity.id: self._distances[identity] for identity in self}

    def to_rows(self) -> list[dict[str, object]]:
        """Return one display row per identity, most trusted first."""
        return [
            {
                "id": identity.id,
                "name": identity.display_name or "",
                "distance": self._distances[identity],
                "hops": len(self.path_to(identity)) - 1,
            }
            for identity in self
        ]

    def __repr__(self) -> str:
        return f"TrustDistances(root={self._root.id!r}, size={len(self._distances)})"


def compute_distances(
    graph: TrustGraph,
    root: Identity,
    params: TrustDistanceParams,
    source: object | None = None,
) -> TrustDistances:
    """Compute the trust distance from *root* to every reachable identity.

    Parameters
    ----------
    graph:
        Trust graph to search.
    root:
        The local identity. Always present with distance 0.
    params:
        Edge costs and the cumulative cost budget.
    source:
        Proof collection *graph* was built from. Defaults to
        ``graph.source``.

    Returns
    -------
    TrustDistances
    """
    vetoed = graph.distrusted_by(root) - {root}
    distances: dict[Identity, int] = {}
    paths: dict[Identity, tuple[Identity, ...]] = {}
    expanded: dict[Identity, list[frozenset[Identity]]] = {}
    sequence = itertools.count()

    heap: list[_Label] = [(0, root.id, (), next(sequence), root, (root,), frozenset())]
    while heap:
        cost, _, _, _, node, path, inherited = heapq.heappop(heap)
        if cost > params.max_distance:
            break

        node_blocked = inherited | graph.distrusted_by(node)
        seen = expanded.setdefault(node, [])
        if any(earlier <= node_blocked for earlier in seen):
            continue
        seen.append(node_blocked)
        if node not in distances:
            distances[node] = cost
            paths[node] = path

        trail = tuple(hop.id for hop in reversed(path))
        for target, level in graph.out_edges(node):
            if target in vetoed or target in node_blocked or target in path:
                continue
            heapq.heappush(
                heap,
                (
                    cost + params.cost(level),
                    target.id,
                    trail,
                    next(sequence),
                    target,
                    path + (target,),
                    node_blocked,
                ),
            )

    logger.debug(
        "Computed trust distances from %s: %d reachable of %d known",
        root.id,
        len(distances),
        len(graph),
    )
    if source is None:
        source = graph.source
    return TrustDistances(root, params, distances, paths, source)
