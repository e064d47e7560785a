"""
Error codes for Faultline.

Structured error codes for machine-parseable reports.

Format: E{category}{number}
- E1xxx: Configuration errors
- E2xxx: Composition errors
- E3xxx: Execution errors
- E4xxx: Store errors
"""

from enum import Enum
from dataclasses import dataclass
from typing import List, Optional


# Process exit codes
EXIT_OK = 0
EXIT_INVALID = 1
EXIT_CONFIG_ERROR = 254


class ErrorCode(Enum):
    """Structured error codes."""

    # E1xxx: Configuration errors
    E1001_INVALID_CONFIG = "E1001"
    E1002_INSUFFICIENT_NODES = "E1002"
    E1003_UNKNOWN_WORKLOAD = "E1003"
    E1004_UNKNOWN_NEMESIS = "E1004"

    # E2xxx: Composition errors
    E2001_SELF_PAIR = "E2001"
    E2002_CLOCK_CONFLICT = "E2002"
    E2003_NEMESIS_LOAD_FAILED = "E2003"

    # E3xxx: Execution errors
    E3001_RUNNER_FAILED = "E3001"
    E3002_RUNNER_TIMEOUT = "E3002"
    E3003_BAD_VERDICT = "E3003"
    E3004_RUNNER_NOT_FOUND = "E3004"

    # E4xxx: Store errors
    E4001_WRITE_FAILED = "E4001"
    E4002_RUN_NOT_FOUND = "E4002"


# Error code metadata
ERROR_METADATA = {
    ErrorCode.E1001_INVALID_CONFIG: {
        'severity': 'error',
        'message': 'Invalid configuration',
        'recoverable': False,
    },
    ErrorCode.E1002_INSUFFICIENT_NODES: {
        'severity': 'error',
        'message': 'Fewer nodes than replicas',
        'recoverable': False,
    },
    ErrorCode.E1003_UNKNOWN_WORKLOAD: {
        'severity': 'error',
        'message': 'Unknown workload',
        'recoverable': False,
    },
    ErrorCode.E1004_UNKNOWN_NEMESIS: {
        'severity': 'error',
        'message': 'Unknown nemesis',
        'recoverable': False,
    },
    ErrorCode.E2001_SELF_PAIR: {
        'severity': 'error',
        'message': 'Nemesis composed with itself',
        'recoverable': False,
    },
    ErrorCode.E2002_CLOCK_CONFLICT: {
        'severity': 'error',
        'message': 'Two clock-affecting nemeses composed together',
        'recoverable': False,
    },
    ErrorCode.E2003_NEMESIS_LOAD_FAILED: {
        'severity': 'error',
        'message': 'Failed to load nemesis',
        'recoverable': False,
    },
    ErrorCode.E3001_RUNNER_FAILED: {
        'severity': 'error',
        'message': 'Test runner exited with an error',
        'recoverable': True,
    },
    ErrorCode.E3002_RUNNER_TIMEOUT: {
        'severity': 'error',
        'message': 'Test runner timed out',
        'recoverable': True,
    },
    ErrorCode.E3003_BAD_VERDICT: {
        'severity': 'error',
        'message': 'Test runner produced no readable verdict',
        'recoverable': True,
    },
    ErrorCode.E3004_RUNNER_NOT_FOUND: {
        'severity': 'error',
        'message': 'Test runner executable not found',
        'recoverable': True,
    },
    ErrorCode.E4001_WRITE_FAILED: {
        'severity': 'warning',
        'message': 'Failed to write results',
        'recoverable': True,
    },
    ErrorCode.E4002_RUN_NOT_FOUND: {
        'severity': 'error',
        'message': 'No stored results for run',
        'recoverable': True,
    },
}


@dataclass
class FaultlineError:
    """
    Structured error with context.

    Example:
        error = FaultlineError(
            code=ErrorCode.E1002_INSUFFICIENT_NODES,
            context={'nodes': 2, 'replicas': 3},
        )
    """
    code: ErrorCode
    context: Optional[dict] = None
    detail: Optional[str] = None

    @property
    def severity(self) -> str:
        return ERROR_METADATA.get(self.code, {}).get('severity', 'error')

    @property
    def message(self) -> str:
        base_msg = ERROR_METADATA.get(self.code, {}).get('message', 'Unknown error')
        if self.detail:
            return f"{base_msg}: {self.detail}"
        if self.context:
            return f"{base_msg}: {self.context}"
        return base_msg

    @property
    def recoverable(self) -> bool:
        return ERROR_METADATA.get(self.code, {}).get('recoverable', False)

    def to_dict(self) -> dict:
        return {
            'code': self.code.value,
            'severity': self.severity,
            'message': self.message,
            'recoverable': self.recoverable,
            'context': self.context,
        }


class ConfigurationError(Exception):
    """
    Raised when a run configuration cannot be executed.

    Always raised before any test run starts; the CLI maps it to
    EXIT_CONFIG_ERROR.
    """

    def __init__(self, *errors: FaultlineError):
        self.errors: List[FaultlineError] = list(errors)
        super().__init__('; '.join(e.message for e in self.errors))

    @property
    def codes(self) -> List[ErrorCode]:
        return [e.code for e in self.errors]

    @classmethod
    def from_messages(cls, messages: List[str]) -> 'ConfigurationError':
        """Wrap plain validation messages as E1001 errors."""
        return cls(*[
            FaultlineError(code=ErrorCode.E1001_INVALID_CONFIG, detail=m)
            for m in messages
        ])
