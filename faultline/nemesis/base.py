"""
Base classes for fault injectors (nemeses).

Nemesis is the abstract base every fault injector inherits. A nemesis
declares the capabilities it perturbs and the operations (``fs``) it
handles; the execution delegate drives it with ``invoke`` calls on a
schedule of its choosing.

NodeControl is the physical backend a nemesis acts through. Faultline does
not ship one: an in-process executor supplies its own (SSH, docker, ...).
Out-of-process runners consume ``plan()`` instead.
"""

import random
from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Sequence, Set, Tuple


class Capability(str, Enum):
    """What part of the cluster a nemesis perturbs."""
    CLOCKS = 'clocks'
    NETWORK = 'network'
    PROCESS = 'process'
    TOPOLOGY = 'topology'


Grudge = Dict[str, Set[str]]


class NodeControl(ABC):
    """
    Physical fault backend.

    Every method acts on live nodes and must be idempotent where it heals
    (heal_network, reset_clock, start, resume).
    """

    @abstractmethod
    def partition(self, grudge: Grudge) -> None:
        """Drop traffic to each node from every node in its grudge set."""

    @abstractmethod
    def heal_network(self) -> None:
        pass

    @abstractmethod
    def bump_clock(self, node: str, delta_ms: int) -> None:
        pass

    @abstractmethod
    def strobe_clock(self, node: str, delta_ms: int, period_ms: int, duration_s: float) -> None:
        pass

    @abstractmethod
    def reset_clock(self, node: str) -> None:
        pass

    @abstractmethod
    def kill(self, node: str) -> None:
        pass

    @abstractmethod
    def start(self, node: str) -> None:
        pass

    @abstractmethod
    def pause(self, node: str) -> None:
        pass

    @abstractmethod
    def resume(self, node: str) -> None:
        pass

    @abstractmethod
    def leave(self, node: str) -> None:
        """Remove a node from the database topology."""

    @abstractmethod
    def join(self, node: str) -> None:
        """Add a node back to the database topology."""


class Nemesis(ABC):
    """
    Abstract base class for fault injectors.

    Lifecycle: ``setup`` once against the cluster, any number of
    ``invoke`` calls, then ``teardown`` which must leave the cluster
    healed for the next test run.
    """

    name: str = 'nemesis'
    capabilities: FrozenSet[Capability] = frozenset()
    fs: Tuple[str, ...] = ('start', 'stop')

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()
        self.control: Optional[NodeControl] = None
        self.nodes: List[str] = []

    @property
    def affects_clocks(self) -> bool:
        return Capability.CLOCKS in self.capabilities

    def setup(self, control: NodeControl, nodes: Sequence[str]) -> 'Nemesis':
        self.control = control
        self.nodes = list(nodes)
        return self

    def invoke(self, op: dict) -> dict:
        """Apply one operation, returning it completed with a value."""
        f = op.get('f')
        if f not in self.fs:
            raise ValueError(f"{self.name} cannot handle operation {f!r}")
        if self.control is None:
            raise RuntimeError(f"{self.name} invoked before setup")
        value = self._apply(f, op.get('value'))
        return {**op, 'type': 'info', 'value': value}

    @abstractmethod
    def _apply(self, f: str, value) -> object:
        pass

    def teardown(self) -> None:
        """Heal whatever this nemesis may have broken."""
        if self.control is not None:
            self._apply('stop', None)

    def params(self) -> dict:
        return {}

    def plan(self) -> dict:
        """Serializable description for out-of-process runners."""
        return {
            'name': self.name,
            'capabilities': sorted(c.value for c in self.capabilities),
            'fs': list(self.fs),
            'params': self.params(),
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class NoopNemesis(Nemesis):
    """Does nothing. The baseline every matrix should include."""

    name = 'none'

    def _apply(self, f: str, value) -> object:
        return None

    def teardown(self) -> None:
        pass
