"""
command.py - Run each test through an external runner process

The runner receives the TestRun as JSON on stdin and reports its verdict
as a JSON object on the last non-empty line of stdout:

    {"valid": true, "stats": {...}}

Anything that goes wrong with the runner itself becomes an invalid
Verdict carrying a structured error, so one broken run never stops the
matrix.
"""

import json
import logging
import shlex
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..core.errors import ErrorCode, FaultlineError
from ..core.report import Verdict
from .base import Executor

logger = logging.getLogger(__name__)

# Output tail kept in verdict detail
TAIL_CHARS = 2000


def _tail(text: Union[str, bytes, None]) -> str:
    # TimeoutExpired carries raw bytes even when text=True
    if isinstance(text, bytes):
        text = text.decode(errors='replace')
    return (text or '')[-TAIL_CHARS:]


def parse_verdict(stdout: str) -> Verdict:
    """Parse the last non-empty stdout line as a JSON verdict."""
    lines = [line for line in stdout.splitlines() if line.strip()]
    if not lines:
        raise ValueError("runner printed nothing")
    data = json.loads(lines[-1])
    if not isinstance(data, dict):
        raise ValueError(f"verdict must be a JSON object, got {type(data).__name__}")
    return Verdict.from_dict(data)


class CommandExecutor(Executor):
    """Executes every TestRun with one invocation of ``command``."""

    def __init__(
        self,
        command: Union[str, Sequence[str]],
        timeout_seconds: Optional[float] = None,
        cwd: Optional[Path] = None,
    ):
        self.command: List[str] = shlex.split(command) if isinstance(command, str) else list(command)
        self.timeout_seconds = timeout_seconds
        self.cwd = cwd

    def run(self, test_run) -> Verdict:
        payload = json.dumps(test_run.to_dict(), default=str)
        context = {'run': test_run.name, 'index': test_run.index}

        try:
            result = subprocess.run(
                self.command,
                input=payload,
                capture_output=True,
                text=True,
                errors='replace',
                timeout=self.timeout_seconds,
                cwd=self.cwd,
            )
        except OSError as e:
            return Verdict.failure(FaultlineError(
                code=ErrorCode.E3004_RUNNER_NOT_FOUND,
                context=context,
                detail=str(e),
            ))
        except subprocess.TimeoutExpired as e:
            logger.error("%s timed out after %ss", test_run.name, self.timeout_seconds)
            return Verdict.failure(
                FaultlineError(code=ErrorCode.E3002_RUNNER_TIMEOUT, context=context),
                stderr=_tail(e.stderr),
            )

        if result.returncode != 0:
            logger.error("%s: runner exited with %d", test_run.name, result.returncode)
            return Verdict.failure(
                FaultlineError(
                    code=ErrorCode.E3001_RUNNER_FAILED,
                    context={**context, 'returncode': result.returncode},
                ),
                stderr=_tail(result.stderr),
            )

        try:
            return parse_verdict(result.stdout)
        except ValueError as e:
            # json.JSONDecodeError is a ValueError
            return Verdict.failure(
                FaultlineError(code=ErrorCode.E3003_BAD_VERDICT, context=context, detail=str(e)),
                stdout=_tail(result.stdout),
            )
