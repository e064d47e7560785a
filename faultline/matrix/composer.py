"""
Nemesis pair composition.

The matrix tests every primary nemesis alongside every secondary one,
restricted to remove:

- identical nemeses on both sides
- pairs of clock-skew nemeses
- duplicate orders: (a, b) after (b, a) has been accepted

The output is a pure function of the two input lists, order included, so
the same command line always schedules the same runs.
"""

from typing import List, Optional, Sequence, Tuple

from ..core.errors import ConfigurationError, ErrorCode, FaultlineError
from ..nemesis.registry import NemesisRef

Ref = Optional[NemesisRef]
Pair = Tuple[Ref, Ref]


def _name(ref: Ref) -> Optional[str]:
    return ref.name if ref is not None else None


def _clocks(ref: Ref) -> bool:
    return ref is not None and ref.affects_clocks


def clock_conflict(x: Ref, y: Ref) -> bool:
    return _clocks(x) and _clocks(y)


def nemesis_product(primaries: Sequence[Ref], secondaries: Sequence[Ref]) -> List[Pair]:
    """The filtered cartesian product of primaries and secondaries."""
    pairs: List[Pair] = []
    seen = set()
    for x in primaries:
        for y in secondaries:
            key = frozenset((x, y))
            if x == y or clock_conflict(x, y) or key in seen:
                continue
            pairs.append((x, y))
            seen.add(key)
    return pairs


def check_pair(pair: Pair) -> Pair:
    """Reject a pair nemesis_product would never have produced."""
    x, y = pair
    if x == y:
        raise ConfigurationError(FaultlineError(
            code=ErrorCode.E2001_SELF_PAIR,
            context={'nemesis': _name(x)},
        ))
    if clock_conflict(x, y):
        raise ConfigurationError(FaultlineError(
            code=ErrorCode.E2002_CLOCK_CONFLICT,
            context={'nemeses': [x.name, y.name]},
        ))
    return pair


def pair_names(pair: Pair) -> List[str]:
    """Names of the nemeses present in a pair, absent members dropped."""
    return [r.name for r in pair if r is not None]
