"""Workloads: named constructors producing TestDefinitions."""

from .definition import TestDefinition, GeneratorConfig
from .catalog import WORKLOADS, WorkloadFn, get_workload, list_workloads

__all__ = [
    'TestDefinition',
    'GeneratorConfig',
    'WORKLOADS',
    'WorkloadFn',
    'get_workload',
    'list_workloads',
]
