"""
Faultline v0.3 - Fault-injection test matrices for distributed databases.

This package provides:
- config: YAML configuration with environment variable support
- core: Structured errors, verdicts and matrix reports
- nemesis: Fault injectors, composition and the nemesis registry
- workloads: Built-in workload constructors
- matrix: Pair composition, scheduling and materialization of test runs
- execution: Execution delegates (external runner, dry run)
- store: Per-run results on disk
- server: Results browser
- cli: Command-line interface
"""

__version__ = "0.3.0"

from .config import FaultlineConfig, load_config
from .core import Verdict, MatrixReport, ResultAggregator, ConfigurationError
from .matrix import MatrixRunner, nemesis_product, plan_matrix, validate_replicas

__all__ = [
    # Version
    '__version__',
    # Config
    'FaultlineConfig',
    'load_config',
    # Core
    'Verdict',
    'MatrixReport',
    'ResultAggregator',
    'ConfigurationError',
    # Matrix
    'MatrixRunner',
    'nemesis_product',
    'plan_matrix',
    'validate_replicas',
]
