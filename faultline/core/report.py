"""
Verdicts and matrix reports.

A Verdict is what the execution delegate hands back for one test run.
The ResultAggregator folds verdicts into a single validity flag and keeps
an ordered record of every run for the final MatrixReport.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from datetime import datetime
from enum import Enum

from .errors import EXIT_OK, EXIT_INVALID, FaultlineError


class MatrixStatus(Enum):
    """Overall matrix status."""
    PASSED = 'passed'
    FAILED = 'failed'


@dataclass
class Verdict:
    """Result of a single test run."""
    valid: bool
    detail: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def failure(cls, error: FaultlineError, **detail) -> 'Verdict':
        """Invalid verdict carrying a structured error."""
        detail['error'] = error.to_dict()
        return cls(valid=False, detail=detail)

    def to_dict(self) -> dict:
        return {'valid': self.valid, 'detail': self.detail}

    @classmethod
    def from_dict(cls, data: dict) -> 'Verdict':
        """
        Build from a runner's JSON output.

        Accepts both ``{"valid": true}`` and ``{"valid?": true}``; every
        other key is kept as detail.
        """
        if 'valid' in data:
            valid = data['valid']
        elif 'valid?' in data:
            valid = data['valid?']
        else:
            raise ValueError("Verdict has no 'valid' key")
        if not isinstance(valid, bool):
            raise ValueError(f"Verdict 'valid' must be a boolean, got {valid!r}")
        detail = data.get('detail')
        if detail is None:
            detail = {k: v for k, v in data.items() if k not in ('valid', 'valid?')}
        return cls(valid=valid, detail=detail)


@dataclass
class RunRecord:
    """Diagnostic record of one executed matrix cell."""
    index: int
    name: str
    workload: str
    nemeses: List[str]
    valid: bool
    started_at: str
    duration_seconds: float = 0.0
    detail: Dict[str, Any] = field(default_factory=dict)
    store_path: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            'index': self.index,
            'name': self.name,
            'workload': self.workload,
            'nemeses': self.nemeses,
            'valid': self.valid,
            'started_at': self.started_at,
            'duration_seconds': round(self.duration_seconds, 3),
            'detail': self.detail,
            'store_path': self.store_path,
        }


@dataclass
class MatrixReport:
    """
    Complete matrix report.

    Example:
        report = aggregator.report()
        print(report.to_json())
        sys.exit(report.exit_code)
    """
    created_at: str = field(default_factory=lambda: datetime.utcnow().isoformat())
    faultline_version: str = '0.3.0'
    config: Dict[str, Any] = field(default_factory=dict)
    runs: List[RunRecord] = field(default_factory=list)
    valid: bool = True

    @property
    def status(self) -> MatrixStatus:
        return MatrixStatus.PASSED if self.valid else MatrixStatus.FAILED

    @property
    def exit_code(self) -> int:
        return EXIT_OK if self.valid else EXIT_INVALID

    @property
    def failed_runs(self) -> List[RunRecord]:
        return [r for r in self.runs if not r.valid]

    def to_dict(self) -> dict:
        return {
            'created_at': self.created_at,
            'faultline_version': self.faultline_version,
            'status': self.status.value,
            'valid': self.valid,
            'exit_code': self.exit_code,
            'total_runs': len(self.runs),
            'failed_runs': len(self.failed_runs),
            'config': self.config,
            'runs': [r.to_dict() for r in self.runs],
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent, default=str)


class ResultAggregator:
    """
    Folds verdicts into one validity flag.

    The flag starts True and is ANDed with every verdict, so the outcome
    is independent of the order runs complete in.
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.valid = True
        self.config = config or {}
        self.records: List[RunRecord] = []

    def add(self, verdict: Verdict, record: Optional[RunRecord] = None) -> bool:
        """Fold one verdict in. Returns the running flag."""
        self.valid = self.valid and verdict.valid
        if record is not None:
            self.records.append(record)
        return self.valid

    @property
    def exit_code(self) -> int:
        return EXIT_OK if self.valid else EXIT_INVALID

    def report(self) -> MatrixReport:
        from .. import __version__
        return MatrixReport(
            faultline_version=__version__,
            config=self.config,
            runs=list(self.records),
            valid=self.valid,
        )
