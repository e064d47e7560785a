"""
Execution delegates.

An Executor takes one materialized TestRun, drives it against the cluster
and returns a Verdict. Expected cluster trouble (network errors, checker
failures, a crashed runner) must come back as an invalid Verdict, never as
an exception: the matrix only aborts on configuration errors.
"""

from abc import ABC, abstractmethod
from typing import List, TYPE_CHECKING

from ..core.report import Verdict

if TYPE_CHECKING:
    from ..matrix.materializer import TestRun


class Executor(ABC):
    """Abstract base class for execution delegates."""

    @abstractmethod
    def run(self, test_run: 'TestRun') -> Verdict:
        pass


class DryRunExecutor(Executor):
    """
    Reports every TestRun valid without touching a cluster.

    Only run names are kept; the TestRun and its live nemesis are
    released once the run returns.
    """

    def __init__(self):
        self.names: List[str] = []

    def run(self, test_run: 'TestRun') -> Verdict:
        self.names.append(test_run.name)
        return Verdict(valid=True, detail={'dry_run': True})
