"""
scheduler.py - Runs the test matrix

For every repetition, every selected workload and every composed nemesis
pair, in that nesting order, materialize one TestRun, hand it to the
executor and fold the verdict into the aggregator. Runs are strictly
sequential so one run's faults cannot bleed into the next. A failed run
never stops the matrix; only configuration errors raised before the first
run do.
"""

import logging
import pprint
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from ..config.schema import FaultlineConfig
from ..core.errors import ConfigurationError
from ..core.report import MatrixReport, ResultAggregator, RunRecord, Verdict
from ..execution.base import Executor
from ..nemesis.registry import get_nemeses
from ..store.results import ResultStore
from ..workloads.catalog import get_workload
from .composer import Pair, nemesis_product, pair_names
from .feasibility import validate_config
from .materializer import materialize

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatrixCell:
    """Position of one test run in the matrix."""
    index: int
    repetition: int
    workload: str
    pair: Pair

    @property
    def nemeses(self) -> List[str]:
        return pair_names(self.pair)


def enumerate_cells(
    test_count: int,
    workloads: Sequence[str],
    pairs: Sequence[Pair],
) -> Iterator[MatrixCell]:
    """Repetition outer, workload middle, pair inner."""
    index = 0
    for repetition in range(test_count):
        for workload in workloads:
            for pair in pairs:
                yield MatrixCell(index, repetition, workload, pair)
                index += 1


def plan_matrix(config: FaultlineConfig) -> List[MatrixCell]:
    """
    Validate the configuration and list every cell it schedules.

    Raises ConfigurationError for invalid settings, too few nodes, or
    unknown workload/nemesis names.
    """
    validate_config(config)
    if not config.matrix.workloads:
        raise ConfigurationError.from_messages(["At least one workload is required"])
    for name in config.matrix.workloads:
        get_workload(name)
    pairs = nemesis_product(
        get_nemeses(config.matrix.nemeses),
        get_nemeses(config.matrix.nemeses2),
    )
    return list(enumerate_cells(config.matrix.test_count, config.matrix.workloads, pairs))


class MatrixRunner:
    """
    Drives the whole matrix through one executor.

    Example:
        runner = MatrixRunner(config, CommandExecutor('./run-test'))
        report = runner.run()
        sys.exit(report.exit_code)
    """

    def __init__(
        self,
        config: FaultlineConfig,
        executor: Executor,
        store: Optional[ResultStore] = None,
        on_result: Optional[Callable[[RunRecord], None]] = None,
    ):
        self.config = config
        self.executor = executor
        self.store = store
        self.on_result = on_result

    def run(self) -> MatrixReport:
        cells = plan_matrix(self.config)
        aggregator = ResultAggregator(config=self.config.redacted().to_dict())

        logger.info(
            "Running %d test(s): %d repetition(s) x %d workload(s) x %d nemesis pair(s)",
            len(cells),
            self.config.matrix.test_count,
            len(self.config.matrix.workloads),
            len({cell.pair for cell in cells}),
        )

        for cell in cells:
            verdict, record = self._run_cell(cell)
            aggregator.add(verdict, record)
            if self.on_result:
                self.on_result(record)

        report = aggregator.report()
        logger.info(
            "Matrix %s: %d/%d runs valid",
            report.status.value,
            len(report.runs) - len(report.failed_runs),
            len(report.runs),
        )
        return report

    def _run_cell(self, cell: MatrixCell) -> Tuple[Verdict, RunRecord]:
        test_run = materialize(
            cell.index, cell.repetition, cell.workload, cell.pair, self.config
        )
        logger.info("Testing\n%s", pprint.pformat(test_run.to_dict(redact=True)))

        started_at = datetime.utcnow().isoformat()
        start = time.monotonic()
        verdict = self.executor.run(test_run)
        duration = time.monotonic() - start

        if verdict.valid:
            logger.info("%s [%d]: valid (%.1fs)", test_run.name, cell.index, duration)
        else:
            logger.warning("%s [%d]: INVALID (%.1fs) %s", test_run.name, cell.index, duration, verdict.detail)

        record = RunRecord(
            index=cell.index,
            name=test_run.name,
            workload=cell.workload,
            nemeses=cell.nemeses,
            valid=verdict.valid,
            started_at=started_at,
            duration_seconds=duration,
            detail=verdict.detail,
        )
        if self.store:
            path = self.store.save(test_run, verdict, record)
            record.store_path = str(path) if path else None
        return verdict, record


def run_matrix(
    config: FaultlineConfig,
    executor: Executor,
    store: Optional[ResultStore] = None,
) -> MatrixReport:
    """Convenience wrapper around MatrixRunner."""
    return MatrixRunner(config, executor, store=store).run()
