"""
Test-matrix orchestration.

- feasibility: pre-flight configuration checks
- composer: deduplicated nemesis pairs
- materializer: binds a cell into an executable TestRun
- scheduler: the sequential matrix loop
"""

from .feasibility import validate_replicas, validate_config
from .composer import Pair, nemesis_product, check_pair, clock_conflict, pair_names
from .materializer import TestRun, materialize, run_seed
from .scheduler import MatrixCell, MatrixRunner, enumerate_cells, plan_matrix, run_matrix

__all__ = [
    'validate_replicas',
    'validate_config',
    'Pair',
    'nemesis_product',
    'check_pair',
    'clock_conflict',
    'pair_names',
    'TestRun',
    'materialize',
    'run_seed',
    'MatrixCell',
    'MatrixRunner',
    'enumerate_cells',
    'plan_matrix',
    'run_matrix',
]
