"""Execution delegates: how a materialized TestRun actually gets run."""

from .base import Executor, DryRunExecutor
from .command import CommandExecutor, parse_verdict

__all__ = [
    'Executor',
    'DryRunExecutor',
    'CommandExecutor',
    'parse_verdict',
]
