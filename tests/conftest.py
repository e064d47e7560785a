"""Shared fixtures for Faultline tests."""

from typing import List, Optional

import pytest

from faultline.config import FaultlineConfig
from faultline.core.report import Verdict
from faultline.execution.base import Executor
from faultline.nemesis.base import NodeControl


class RecordingControl(NodeControl):
    """NodeControl that records every call instead of touching nodes."""

    def __init__(self):
        self.calls: List[tuple] = []

    def partition(self, grudge):
        self.calls.append(('partition', grudge))

    def heal_network(self):
        self.calls.append(('heal_network',))

    def bump_clock(self, node, delta_ms):
        self.calls.append(('bump_clock', node, delta_ms))

    def strobe_clock(self, node, delta_ms, period_ms, duration_s):
        self.calls.append(('strobe_clock', node, delta_ms, period_ms, duration_s))

    def reset_clock(self, node):
        self.calls.append(('reset_clock', node))

    def kill(self, node):
        self.calls.append(('kill', node))

    def start(self, node):
        self.calls.append(('start', node))

    def pause(self, node):
        self.calls.append(('pause', node))

    def resume(self, node):
        self.calls.append(('resume', node))

    def leave(self, node):
        self.calls.append(('leave', node))

    def join(self, node):
        self.calls.append(('join', node))

    def names(self) -> List[str]:
        return [c[0] for c in self.calls]


class ScriptedExecutor(Executor):
    """Returns verdicts from a script, keyed by run index; valid otherwise."""

    def __init__(self, invalid: Optional[set] = None):
        self.invalid = invalid or set()
        self.runs = []

    def run(self, test_run):
        self.runs.append(test_run)
        if test_run.index in self.invalid:
            return Verdict(valid=False, detail={'anomaly': 'lost write'})
        return Verdict(valid=True)


NODES = ['n1', 'n2', 'n3', 'n4', 'n5']


@pytest.fixture
def control():
    return RecordingControl()


@pytest.fixture
def nodes():
    return list(NODES)


@pytest.fixture
def make_config():
    """Build a FaultlineConfig from keyword overrides per section."""

    def _make(
        workloads=('bank',),
        nemeses=('none',),
        nemeses2=(None,),
        test_count=1,
        nodes=NODES,
        replicas=3,
        seed=None,
    ) -> FaultlineConfig:
        cfg = FaultlineConfig()
        cfg.cluster.nodes = list(nodes)
        cfg.cluster.replicas = replicas
        cfg.matrix.workloads = list(workloads)
        cfg.matrix.nemeses = list(nemeses)
        cfg.matrix.nemeses2 = list(nemeses2)
        cfg.matrix.test_count = test_count
        cfg.matrix.seed = seed
        return cfg

    return _make


@pytest.fixture
def scripted_executor():
    """Factory for executors that fail the given run indices."""
    return ScriptedExecutor
