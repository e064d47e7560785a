"""
Configuration schema for Faultline.

Supports:
- YAML file loading
- Environment variable substitution (${VAR_NAME})
- Validation with error messages
- Secret redaction for safe logging

Example config (faultline.yml):
    version: 1

    cluster:
      nodes: [n1, n2, n3, n4, n5]
      replicas: 3

    workload:
      strong_read: true
      datadog_api_key: ${DATADOG_API_KEY}

    matrix:
      test_count: 2
      workloads: [bank, register]
      nemeses: [none, partitions]
      nemeses2: [~, small-skews]
"""

import os
import re
import copy
from pathlib import Path
from dataclasses import dataclass, field, asdict
from typing import Optional, List, Any

import yaml


REDACTED = '***REDACTED***'

DEFAULT_NODES = ['n1', 'n2', 'n3', 'n4', 'n5']


def _substitute_env_vars(value: Any) -> Any:
    """
    Substitute ${VAR_NAME} with environment variable values.

    Example:
        ${DATADOG_API_KEY} → os.environ.get('DATADOG_API_KEY')
    """
    if isinstance(value, str):
        pattern = r'\$\{([^}]+)\}'

        def replace(match):
            var_name = match.group(1)
            env_value = os.environ.get(var_name)
            if env_value is None:
                return match.group(0)  # Keep original if not found
            return env_value

        return re.sub(pattern, replace, value)

    elif isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}

    elif isinstance(value, list):
        return [_substitute_env_vars(v) for v in value]

    return value


def read_nodes_file(path: Path) -> List[str]:
    """Read one node name per line, skipping blanks and # comments."""
    nodes = []
    for line in Path(path).read_text().splitlines():
        line = line.strip()
        if line and not line.startswith('#'):
            nodes.append(line)
    return nodes


@dataclass
class ClusterConfig:
    """Cluster topology and access."""
    nodes: List[str] = field(default_factory=lambda: list(DEFAULT_NODES))
    nodes_file: Optional[str] = None
    replicas: int = 3
    username: str = 'root'
    ssh_private_key: Optional[str] = None

    def resolved_nodes(self) -> List[str]:
        """Nodes from nodes_file when set, otherwise the inline list."""
        if self.nodes_file:
            return read_nodes_file(Path(self.nodes_file))
        return list(self.nodes)


@dataclass
class WorkloadOptions:
    """Options handed to every workload constructor."""
    strong_read: bool = True
    at_query: bool = False
    fixed_instances: bool = False
    serialized_indices: bool = False
    wait_for_convergence: bool = False
    version: str = '2.5.5'
    datadog_api_key: Optional[str] = None
    time_limit: float = 60.0
    concurrency: int = 10
    clear_cache: bool = False


@dataclass
class MatrixConfig:
    """Which cells make up the test matrix."""
    test_count: int = 1
    workloads: List[str] = field(default_factory=list)
    nemeses: List[Optional[str]] = field(default_factory=lambda: ['none'])
    # None is the absent secondary, distinct from the no-op 'none' nemesis
    nemeses2: List[Optional[str]] = field(default_factory=lambda: [None])
    seed: Optional[int] = None


@dataclass
class ExecutorConfig:
    """How each test run is executed and where results go."""
    command: Optional[str] = None
    timeout_seconds: Optional[float] = None
    store_dir: str = 'store'


@dataclass
class FaultlineConfig:
    """Root configuration."""

    version: int = 1
    cluster: ClusterConfig = field(default_factory=ClusterConfig)
    workload: WorkloadOptions = field(default_factory=WorkloadOptions)
    matrix: MatrixConfig = field(default_factory=MatrixConfig)
    executor: ExecutorConfig = field(default_factory=ExecutorConfig)

    @classmethod
    def load(cls, path: Path) -> 'FaultlineConfig':
        """Load from YAML file with env var substitution."""
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Config not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        data = _substitute_env_vars(data)
        return cls.from_dict(data)

    @classmethod
    def from_dict(cls, data: dict) -> 'FaultlineConfig':
        """Create from dictionary."""
        return cls(
            version=data.get('version', 1),
            cluster=ClusterConfig(**data.get('cluster', {})),
            workload=WorkloadOptions(**data.get('workload', {})),
            matrix=MatrixConfig(**data.get('matrix', {})),
            executor=ExecutorConfig(**data.get('executor', {})),
        )

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return asdict(self)

    def to_yaml(self) -> str:
        """Convert to YAML string."""
        return yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)

    @property
    def nodes(self) -> List[str]:
        return self.cluster.resolved_nodes()

    def _type_errors(self) -> List[str]:
        """Values YAML parsed to the wrong type, e.g. replicas: '3'."""
        expected = [
            ('cluster.replicas', self.cluster.replicas, int),
            ('cluster.nodes', self.cluster.nodes, list),
            ('matrix.test_count', self.matrix.test_count, int),
            ('matrix.workloads', self.matrix.workloads, list),
            ('matrix.nemeses', self.matrix.nemeses, list),
            ('matrix.nemeses2', self.matrix.nemeses2, list),
            ('workload.time_limit', self.workload.time_limit, (int, float)),
            ('workload.concurrency', self.workload.concurrency, int),
        ]
        if self.executor.timeout_seconds is not None:
            expected.append(('executor.timeout_seconds', self.executor.timeout_seconds, (int, float)))
        if self.matrix.seed is not None:
            expected.append(('matrix.seed', self.matrix.seed, int))

        errors = []
        for name, value, types in expected:
            # bool is an int subclass
            if isinstance(value, bool) or not isinstance(value, types):
                errors.append(f"Invalid type for {name}: {value!r}")
        return errors

    def validate(self) -> List[str]:
        """Validate config. Returns list of errors (empty if valid)."""
        errors = self._type_errors()
        if errors:
            return errors

        if self.cluster.replicas <= 0:
            errors.append(f"Replicas must be a positive integer: {self.cluster.replicas}")

        if self.cluster.nodes_file and not Path(self.cluster.nodes_file).exists():
            errors.append(f"Nodes file not found: {self.cluster.nodes_file}")
        elif not self.nodes:
            errors.append("At least one node is required")

        if self.matrix.test_count <= 0:
            errors.append(f"Invalid test_count: {self.matrix.test_count}")

        if self.workload.time_limit <= 0:
            errors.append(f"Invalid time_limit: {self.workload.time_limit}")

        if self.workload.concurrency <= 0:
            errors.append(f"Invalid concurrency: {self.workload.concurrency}")

        if not self.matrix.nemeses:
            errors.append("At least one primary nemesis is required")

        if not self.matrix.nemeses2:
            errors.append("At least one secondary nemesis is required")

        if self.executor.timeout_seconds is not None and self.executor.timeout_seconds <= 0:
            errors.append(f"Invalid executor timeout: {self.executor.timeout_seconds}")

        return errors

    def redacted(self) -> 'FaultlineConfig':
        """Return copy with secrets redacted."""
        redacted = copy.deepcopy(self)
        if redacted.workload.datadog_api_key:
            redacted.workload.datadog_api_key = REDACTED
        if redacted.cluster.ssh_private_key:
            redacted.cluster.ssh_private_key = REDACTED
        return redacted


def load_config(path: Optional[Path] = None) -> FaultlineConfig:
    """Load config from file or return defaults."""
    if path:
        return FaultlineConfig.load(path)

    search_paths = [
        Path('./faultline.yml'),
        Path('./faultline.yaml'),
        Path.home() / '.faultline' / 'config.yml',
    ]

    for p in search_paths:
        if p.exists():
            return FaultlineConfig.load(p)

    return FaultlineConfig()


def generate_default_config() -> str:
    """Generate default config as YAML."""
    return """# Faultline Configuration
version: 1

cluster:
  nodes: [n1, n2, n3, n4, n5]
  replicas: 3
  username: root

workload:
  strong_read: true
  at_query: false
  fixed_instances: false
  serialized_indices: false
  wait_for_convergence: false
  version: "2.5.5"
  time_limit: 60
  concurrency: 10
  # datadog_api_key: ${DATADOG_API_KEY}

matrix:
  test_count: 1
  workloads: [bank]
  nemeses: [none]
  nemeses2: [~]

executor:
  command: null
  store_dir: store
"""
