"""
Nemesis composition.

A composed nemesis multiplexes its members: every member keeps its own
operations, addressed as ``"<member>:<f>"``, so two members that both
understand ``start`` never collide. Members act independently; composing
is commutative for any pair the matrix composer accepts.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from ..core.errors import ConfigurationError, ErrorCode, FaultlineError
from .base import Nemesis, NodeControl

logger = logging.getLogger(__name__)

SEPARATOR = ':'


class ComposedNemesis(Nemesis):
    """Routes each operation to the member named in its prefix."""

    def __init__(self, members: Sequence[Nemesis]):
        super().__init__()
        self.members: List[Nemesis] = list(members)
        self._by_name = {m.name: m for m in self.members}
        self.name = '+'.join(m.name for m in self.members) or 'none'
        self.capabilities = frozenset().union(*(m.capabilities for m in self.members))
        self.fs = tuple(
            f"{m.name}{SEPARATOR}{f}" for m in self.members for f in m.fs
        )

    def setup(self, control: NodeControl, nodes: Sequence[str]) -> 'ComposedNemesis':
        super().setup(control, nodes)
        for member in self.members:
            member.setup(control, nodes)
        return self

    def invoke(self, op: dict) -> dict:
        f = op.get('f') or ''
        member_name, _, member_f = f.partition(SEPARATOR)
        member = self._by_name.get(member_name)
        if member is None or not member_f:
            raise ValueError(f"{self.name} cannot route operation {f!r}")
        completed = member.invoke({**op, 'f': member_f})
        return {**completed, 'f': f}

    def _apply(self, f: str, value) -> object:
        raise NotImplementedError("ComposedNemesis routes through invoke()")

    def teardown(self) -> None:
        """Heal every member, then re-raise the first failure."""
        failures = []
        for member in self.members:
            try:
                member.teardown()
            except Exception as e:
                logger.error("%s teardown failed: %s", member.name, e)
                failures.append(e)
        if failures:
            raise failures[0]

    def plan(self) -> dict:
        plan = super().plan()
        plan['members'] = [m.plan() for m in self.members]
        return plan


def check_composable(nemeses: Iterable[Nemesis]) -> None:
    """
    Raise ConfigurationError for combinations the matrix composer excludes.

    The composer should never hand these over; reaching this means its
    exclusion rules were bypassed.
    """
    seen = set()
    clock_members = []
    for nemesis in nemeses:
        if nemesis.name in seen:
            raise ConfigurationError(FaultlineError(
                code=ErrorCode.E2001_SELF_PAIR,
                context={'nemesis': nemesis.name},
            ))
        seen.add(nemesis.name)
        if nemesis.affects_clocks:
            clock_members.append(nemesis.name)

    if len(clock_members) > 1:
        raise ConfigurationError(FaultlineError(
            code=ErrorCode.E2002_CLOCK_CONFLICT,
            context={'nemeses': clock_members},
        ))


def compose(nemeses: Iterable[Optional[Nemesis]]) -> ComposedNemesis:
    """Compose nemeses into one, skipping absent (None) members."""
    members = [n for n in nemeses if n is not None]
    check_composable(members)
    return ComposedNemesis(members)
