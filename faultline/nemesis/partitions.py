"""
Network partition nemeses.

A grudge maps each node to the set of nodes it refuses traffic from.
Grudge builders are pure functions over the node list and an explicit
random source, so a seeded run always cuts the same links.
"""

import random
from typing import Callable, List, Optional, Sequence

from .base import Capability, Grudge, Nemesis


def complete_grudge(components: Sequence[Sequence[str]]) -> Grudge:
    """Every node hates every node outside its own component."""
    all_nodes = {n for c in components for n in c}
    grudge: Grudge = {}
    for component in components:
        members = set(component)
        for node in component:
            grudge[node] = all_nodes - members
    return grudge


def bisect(nodes: Sequence[str]) -> List[List[str]]:
    """Split into two halves; the first is the smaller one."""
    half = len(nodes) // 2
    return [list(nodes[:half]), list(nodes[half:])]


def random_halves(nodes: Sequence[str], rng: random.Random) -> Grudge:
    shuffled = list(nodes)
    rng.shuffle(shuffled)
    return complete_grudge(bisect(shuffled))


def isolate_node(nodes: Sequence[str], rng: random.Random) -> Grudge:
    """Cut a single random node off from the rest."""
    node = rng.choice(list(nodes))
    rest = [n for n in nodes if n != node]
    return complete_grudge([[node], rest])


def majorities_ring(nodes: Sequence[str], rng: random.Random) -> Grudge:
    """
    Every node sees a majority, but no two nodes see the same majority.

    Nodes are placed on a shuffled ring; each one keeps links only to its
    nearest neighbours on either side, enough to form a majority.
    """
    ring = list(nodes)
    rng.shuffle(ring)
    n = len(ring)
    if n < 3:
        return {node: set() for node in ring}

    majority = n // 2 + 1
    reach = majority // 2
    grudge: Grudge = {}
    for i, node in enumerate(ring):
        visible = {ring[(i + d) % n] for d in range(-reach, reach + 1)}
        grudge[node] = set(ring) - visible
    return grudge


GrudgeFn = Callable[[Sequence[str], random.Random], Grudge]


class PartitionNemesis(Nemesis):
    """Starts a partition chosen by a grudge function; stop heals it."""

    capabilities = frozenset({Capability.NETWORK})

    def __init__(self, name: str, grudge_fn: GrudgeFn, rng: Optional[random.Random] = None):
        super().__init__(rng)
        self.name = name
        self.grudge_fn = grudge_fn

    def _apply(self, f: str, value) -> object:
        if f == 'start':
            grudge = value if value is not None else self.grudge_fn(self.nodes, self.rng)
            self.control.partition(grudge)
            return {node: sorted(hated) for node, hated in grudge.items()}
        self.control.heal_network()
        return 'network healed'

    def params(self) -> dict:
        return {'grudge': self.grudge_fn.__name__}


def parts(rng: Optional[random.Random] = None) -> PartitionNemesis:
    return PartitionNemesis('parts', isolate_node, rng)


def partitions(rng: Optional[random.Random] = None) -> PartitionNemesis:
    return PartitionNemesis('partitions', random_halves, rng)


def majority_ring(rng: Optional[random.Random] = None) -> PartitionNemesis:
    return PartitionNemesis('majority-ring', majorities_ring, rng)
