"""Process and topology nemeses: kill, pause, and membership changes."""

import random
from typing import List, Optional

from .base import Capability, Nemesis


class NodeTargetNemesis(Nemesis):
    """
    Picks ``count`` random nodes on start and restores exactly those on stop.

    Subclasses name the break/restore pair of NodeControl calls.
    """

    capabilities = frozenset({Capability.PROCESS})
    break_action = ''
    restore_action = ''

    def __init__(self, name: str, count: int = 1, rng: Optional[random.Random] = None):
        super().__init__(rng)
        self.name = name
        self.count = count
        self.affected: List[str] = []

    def _apply(self, f: str, value) -> object:
        if f == 'start':
            targets = value if value is not None else self.rng.sample(
                self.nodes, min(self.count, len(self.nodes))
            )
            for node in targets:
                getattr(self.control, self.break_action)(node)
            self.affected = sorted(set(self.affected) | set(targets))
            return sorted(targets)

        restored, self.affected = self.affected, []
        for node in restored:
            getattr(self.control, self.restore_action)(node)
        return restored

    def params(self) -> dict:
        return {'count': self.count}


class KillNemesis(NodeTargetNemesis):
    break_action = 'kill'
    restore_action = 'start'


class PauseNemesis(NodeTargetNemesis):
    break_action = 'pause'
    restore_action = 'resume'


class TopologyNemesis(NodeTargetNemesis):
    """Removes nodes from the database topology and joins them back."""

    capabilities = frozenset({Capability.TOPOLOGY})
    break_action = 'leave'
    restore_action = 'join'


def start_kill(count: int = 1, rng: Optional[random.Random] = None) -> KillNemesis:
    return KillNemesis('start-kill', count, rng)


def start_stop(count: int = 1, rng: Optional[random.Random] = None) -> PauseNemesis:
    return PauseNemesis('start-stop', count, rng)


def topology(rng: Optional[random.Random] = None) -> TopologyNemesis:
    return TopologyNemesis('topology', 1, rng)
