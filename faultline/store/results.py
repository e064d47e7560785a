"""
Results store.

Every executed test run gets its own directory:

    <store>/<test name>/<timestamp>/
        test.json      the materialized TestRun (secrets redacted)
        results.json   verdict and run record

The layout is what the results browser serves.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from ..core.errors import ErrorCode, FaultlineError
from ..core.report import RunRecord, Verdict

logger = logging.getLogger(__name__)

TIMESTAMP_FORMAT = '%Y%m%dT%H%M%S.%f'


class ResultStore:
    """Filesystem store for per-run results."""

    def __init__(self, base_dir: Path):
        self.base_dir = Path(base_dir)

    def save(self, test_run, verdict: Verdict, record: RunRecord) -> Optional[Path]:
        """
        Write one run's files. Returns the run directory, or None if the
        write failed; a full disk must not cost the matrix its verdicts.
        """
        timestamp = datetime.now().strftime(TIMESTAMP_FORMAT)
        run_dir = self.base_dir / test_run.name / timestamp

        try:
            run_dir.mkdir(parents=True, exist_ok=True)
            (run_dir / 'test.json').write_text(
                json.dumps(test_run.to_dict(redact=True), indent=2, default=str)
            )
            results = {
                'valid': verdict.valid,
                'detail': verdict.detail,
                'record': record.to_dict(),
            }
            (run_dir / 'results.json').write_text(json.dumps(results, indent=2, default=str))
        except OSError as e:
            error = FaultlineError(
                code=ErrorCode.E4001_WRITE_FAILED,
                context={'path': str(run_dir)},
                detail=str(e),
            )
            logger.warning("%s [%s]", error.message, error.code.value)
            return None

        return run_dir

    def _run_dir(self, test: str, timestamp: str) -> Path:
        run_dir = (self.base_dir / test / timestamp).resolve()
        if self.base_dir.resolve() not in run_dir.parents:
            raise FileNotFoundError(f"No run {test}/{timestamp}")
        return run_dir

    def list_runs(self) -> List[dict]:
        """Summaries of every stored run, newest first."""
        runs = []
        if not self.base_dir.exists():
            return runs

        for results_file in self.base_dir.glob('*/*/results.json'):
            run_dir = results_file.parent
            try:
                results = json.loads(results_file.read_text())
            except (OSError, ValueError):
                logger.warning("Unreadable results: %s", results_file)
                continue
            runs.append({
                'test': run_dir.parent.name,
                'timestamp': run_dir.name,
                'valid': results.get('valid'),
            })

        runs.sort(key=lambda r: r['timestamp'], reverse=True)
        return runs

    def load(self, test: str, timestamp: str) -> dict:
        """
        Load a stored run.

        Raises FileNotFoundError if there is no such run.
        """
        run_dir = self._run_dir(test, timestamp)
        results_file = run_dir / 'results.json'
        if not results_file.exists():
            raise FileNotFoundError(f"No run {test}/{timestamp}")

        data = {
            'test': test,
            'timestamp': timestamp,
            'results': json.loads(results_file.read_text()),
        }
        test_file = run_dir / 'test.json'
        if test_file.exists():
            data['test_run'] = json.loads(test_file.read_text())
        return data
