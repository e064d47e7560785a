"""
definition.py - What a workload hands to the executor

A TestDefinition names the client a runner should drive, the checkers
that judge the resulting history, and how operations are generated. The
orchestrator treats it as opaque apart from serializing it.
"""

from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List


@dataclass
class GeneratorConfig:
    """Client operation schedule."""
    time_limit: float = 60.0
    concurrency: int = 10
    rate: float = 10.0  # ops/sec per client
    final_reads: bool = True


@dataclass
class TestDefinition:
    """Complete description of one workload's test."""
    name: str
    workload: str
    client: str
    checkers: List[str]
    generator: GeneratorConfig = field(default_factory=GeneratorConfig)
    options: Dict[str, Any] = field(default_factory=dict)

    # Not a pytest test class despite the name
    __test__ = False

    def to_dict(self) -> dict:
        return asdict(self)
