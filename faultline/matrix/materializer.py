"""
Test materialization.

Binds one matrix cell to live objects: the workload's TestDefinition, the
two nemeses of the cell's pair composed into one, and the shared cluster
settings. Nothing is constructed before this point, so constructor side
effects happen exactly once per test run.
"""

import copy
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..config.schema import FaultlineConfig, REDACTED
from ..nemesis.compose import ComposedNemesis, compose
from ..nemesis.registry import resolve
from ..workloads.catalog import get_workload
from ..workloads.definition import TestDefinition
from .composer import Pair, check_pair, pair_names

SECRET_KEYS = ('datadog_api_key', 'ssh_private_key')


@dataclass
class TestRun:
    """One fully specified, executable matrix cell."""
    index: int
    repetition: int
    name: str
    nodes: List[str]
    replicas: int
    test: TestDefinition
    nemesis: ComposedNemesis
    nemeses: List[str] = field(default_factory=list)
    seed: Optional[int] = None
    options: Dict[str, Any] = field(default_factory=dict)

    __test__ = False

    @property
    def workload(self) -> str:
        return self.test.name

    def to_dict(self, redact: bool = False) -> dict:
        data = {
            'index': self.index,
            'repetition': self.repetition,
            'name': self.name,
            'nodes': list(self.nodes),
            'replicas': self.replicas,
            'seed': self.seed,
            'test': self.test.to_dict(),
            'nemesis': self.nemesis.plan(),
            'options': copy.deepcopy(self.options),
        }
        if redact:
            for section in (data['options'], data['test']['options']):
                for key in SECRET_KEYS:
                    if section.get(key):
                        section[key] = REDACTED
        return data


def run_seed(config: FaultlineConfig, index: int) -> Optional[int]:
    """Per-run seed derived from the matrix seed, if one was given."""
    if config.matrix.seed is None:
        return None
    return config.matrix.seed + index


def materialize(
    index: int,
    repetition: int,
    workload: str,
    pair: Pair,
    config: FaultlineConfig,
) -> TestRun:
    """Build the TestRun for one (repetition, workload, pair) cell."""
    check_pair(pair)

    seed = run_seed(config, index)
    rng = random.Random(seed)
    nemesis = compose(resolve(ref, rng) for ref in pair)

    test = get_workload(workload)(config.workload)

    return TestRun(
        index=index,
        repetition=repetition,
        name=f"{test.name}-{nemesis.name}",
        nodes=config.nodes,
        replicas=config.cluster.replicas,
        test=test,
        nemesis=nemesis,
        nemeses=pair_names(pair),
        seed=seed,
        options={
            'username': config.cluster.username,
            'ssh_private_key': config.cluster.ssh_private_key,
            'version': config.workload.version,
            'clear_cache': config.workload.clear_cache,
            'wait_for_convergence': config.workload.wait_for_convergence,
        },
    )
