"""
Clock skew nemeses.

Two of these must never run at the same time: concurrent skew strategies
overwrite each other's offsets and the resulting skew is not reproducible.
"""

import random
from typing import Optional

from .base import Capability, Nemesis


class ClockSkewNemesis(Nemesis):
    """Bumps a random subset of node clocks by up to ``max_skew_ms``."""

    capabilities = frozenset({Capability.CLOCKS})

    def __init__(self, name: str, max_skew_ms: int, rng: Optional[random.Random] = None):
        super().__init__(rng)
        self.name = name
        self.max_skew_ms = max_skew_ms

    def _apply(self, f: str, value) -> object:
        if f == 'start':
            deltas = value if value is not None else self._random_deltas()
            for node, delta in deltas.items():
                self.control.bump_clock(node, delta)
            return deltas
        for node in self.nodes:
            self.control.reset_clock(node)
        return 'clocks reset'

    def _random_deltas(self) -> dict:
        count = self.rng.randint(1, len(self.nodes))
        targets = self.rng.sample(self.nodes, count)
        return {
            node: self.rng.randint(-self.max_skew_ms, self.max_skew_ms)
            for node in targets
        }

    def params(self) -> dict:
        return {'max_skew_ms': self.max_skew_ms}


class StrobeNemesis(Nemesis):
    """Flips node clocks back and forth by ``delta_ms`` every ``period_ms``."""

    name = 'strobe-skews'
    capabilities = frozenset({Capability.CLOCKS})

    def __init__(
        self,
        delta_ms: int = 200,
        period_ms: int = 10,
        duration_s: float = 10.0,
        rng: Optional[random.Random] = None,
    ):
        super().__init__(rng)
        self.delta_ms = delta_ms
        self.period_ms = period_ms
        self.duration_s = duration_s

    def _apply(self, f: str, value) -> object:
        if f == 'start':
            targets = value if value is not None else self.rng.sample(
                self.nodes, self.rng.randint(1, len(self.nodes))
            )
            for node in targets:
                self.control.strobe_clock(node, self.delta_ms, self.period_ms, self.duration_s)
            return sorted(targets)
        for node in self.nodes:
            self.control.reset_clock(node)
        return 'clocks reset'

    def params(self) -> dict:
        return {
            'delta_ms': self.delta_ms,
            'period_ms': self.period_ms,
            'duration_s': self.duration_s,
        }


def small_skews(rng: Optional[random.Random] = None) -> ClockSkewNemesis:
    return ClockSkewNemesis('small-skews', 100, rng)


def subcritical_skews(rng: Optional[random.Random] = None) -> ClockSkewNemesis:
    return ClockSkewNemesis('subcritical-skews', 200, rng)


def critical_skews(rng: Optional[random.Random] = None) -> ClockSkewNemesis:
    return ClockSkewNemesis('critical-skews', 250, rng)


def big_skews(rng: Optional[random.Random] = None) -> ClockSkewNemesis:
    return ClockSkewNemesis('big-skews', 500, rng)


def huge_skews(rng: Optional[random.Random] = None) -> ClockSkewNemesis:
    return ClockSkewNemesis('huge-skews', 5000, rng)


def strobe_skews(rng: Optional[random.Random] = None) -> StrobeNemesis:
    return StrobeNemesis(rng=rng)
