"""Core types: structured errors, verdicts and matrix reports."""

from .errors import (
    ErrorCode,
    FaultlineError,
    ConfigurationError,
    ERROR_METADATA,
    EXIT_OK,
    EXIT_INVALID,
    EXIT_CONFIG_ERROR,
)
from .report import Verdict, RunRecord, MatrixReport, MatrixStatus, ResultAggregator

__all__ = [
    'ErrorCode',
    'FaultlineError',
    'ConfigurationError',
    'ERROR_METADATA',
    'EXIT_OK',
    'EXIT_INVALID',
    'EXIT_CONFIG_ERROR',
    'Verdict',
    'RunRecord',
    'MatrixReport',
    'MatrixStatus',
    'ResultAggregator',
]
