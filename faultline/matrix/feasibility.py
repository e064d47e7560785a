"""Pre-flight checks run once before any test run starts."""

from ..config.schema import FaultlineConfig
from ..core.errors import ConfigurationError, ErrorCode, FaultlineError


def validate_replicas(config: FaultlineConfig) -> FaultlineConfig:
    """
    Check that there are enough nodes for the requested replica count.

    Returns the configuration unchanged, or raises ConfigurationError
    carrying both counts.
    """
    nodes = config.nodes
    replicas = config.cluster.replicas
    if len(nodes) < replicas:
        raise ConfigurationError(FaultlineError(
            code=ErrorCode.E1002_INSUFFICIENT_NODES,
            context={'nodes': len(nodes), 'replicas': replicas},
            detail=f"{len(nodes)} nodes ({', '.join(nodes)}) for {replicas} replicas",
        ))
    return config


def validate_config(config: FaultlineConfig) -> FaultlineConfig:
    """Schema validation followed by the replica check."""
    errors = config.validate()
    if errors:
        raise ConfigurationError.from_messages(errors)
    return validate_replicas(config)
