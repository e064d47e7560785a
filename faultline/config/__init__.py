"""Configuration management for Faultline."""

from .schema import (
    FaultlineConfig,
    ClusterConfig,
    WorkloadOptions,
    MatrixConfig,
    ExecutorConfig,
    REDACTED,
    DEFAULT_NODES,
    read_nodes_file,
    load_config,
    generate_default_config,
)

__all__ = [
    'FaultlineConfig',
    'ClusterConfig',
    'WorkloadOptions',
    'MatrixConfig',
    'ExecutorConfig',
    'REDACTED',
    'DEFAULT_NODES',
    'read_nodes_file',
    'load_config',
    'generate_default_config',
]
