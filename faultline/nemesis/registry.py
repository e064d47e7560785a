"""
Nemesis registry.

Entries are deferred references: an import path plus constructor
arguments and the capabilities the nemesis declares. Refs can be
compared, hashed and deduplicated without constructing anything; the
live nemesis is only built by ``NemesisRef.resolve`` when a test run is
materialized.
"""

import importlib
import random
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Sequence, Tuple

from ..core.errors import ConfigurationError, ErrorCode, FaultlineError
from .base import Capability, Nemesis

# The absent secondary nemesis. Distinct from the registered no-op 'none'.
ABSENT = None


@dataclass(frozen=True, eq=False)
class NemesisRef:
    """Symbolic reference to a nemesis constructor."""
    name: str
    target: str
    args: Tuple = ()
    capabilities: FrozenSet[Capability] = field(default_factory=frozenset)

    def __eq__(self, other) -> bool:
        if not isinstance(other, NemesisRef):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash(self.name)

    @property
    def affects_clocks(self) -> bool:
        return Capability.CLOCKS in self.capabilities

    def resolve(self, rng: Optional[random.Random] = None) -> Nemesis:
        """Import the constructor and build a live nemesis."""
        module_name, _, attr = self.target.partition(':')
        try:
            module = importlib.import_module(module_name)
            constructor = getattr(module, attr)
        except (ImportError, AttributeError) as e:
            raise ConfigurationError(FaultlineError(
                code=ErrorCode.E2003_NEMESIS_LOAD_FAILED,
                context={'nemesis': self.name, 'target': self.target},
                detail=str(e),
            )) from e
        return constructor(*self.args, rng=rng)

    def __repr__(self) -> str:
        return f"NemesisRef({self.name!r})"


def _ref(name: str, target: str, *args, caps=()) -> NemesisRef:
    return NemesisRef(
        name=name,
        target=f"faultline.nemesis.{target}",
        args=tuple(args),
        capabilities=frozenset(caps),
    )


NETWORK = (Capability.NETWORK,)
CLOCKS = (Capability.CLOCKS,)
PROCESS = (Capability.PROCESS,)

NEMESES: Dict[str, NemesisRef] = {
    ref.name: ref for ref in [
        _ref('none', 'base:NoopNemesis'),
        _ref('parts', 'partitions:parts', caps=NETWORK),
        _ref('partitions', 'partitions:partitions', caps=NETWORK),
        _ref('majority-ring', 'partitions:majority_ring', caps=NETWORK),
        _ref('topology', 'process:topology', caps=(Capability.TOPOLOGY,)),
        _ref('strobe-skews', 'clocks:strobe_skews', caps=CLOCKS),
        _ref('small-skews', 'clocks:small_skews', caps=CLOCKS),
        _ref('subcritical-skews', 'clocks:subcritical_skews', caps=CLOCKS),
        _ref('critical-skews', 'clocks:critical_skews', caps=CLOCKS),
        _ref('big-skews', 'clocks:big_skews', caps=CLOCKS),
        _ref('huge-skews', 'clocks:huge_skews', caps=CLOCKS),
        _ref('start-kill', 'process:start_kill', 1, caps=PROCESS),
        _ref('start-stop', 'process:start_stop', 1, caps=PROCESS),
    ]
}


def get_nemesis(name: Optional[str]) -> Optional[NemesisRef]:
    """Look up a nemesis by name. None maps to the absent nemesis."""
    if name is None:
        return ABSENT
    if name not in NEMESES:
        raise ConfigurationError(FaultlineError(
            code=ErrorCode.E1004_UNKNOWN_NEMESIS,
            detail=f"{name}. Available: {', '.join(NEMESES.keys())}",
        ))
    return NEMESES[name]


def get_nemeses(names: Sequence[Optional[str]]) -> List[Optional[NemesisRef]]:
    """Resolve names in order, keeping duplicates."""
    return [get_nemesis(n) for n in names]


def list_nemeses() -> list:
    """List all registered nemesis names."""
    return list(NEMESES.keys())


def resolve(ref: Optional[NemesisRef], rng: Optional[random.Random] = None) -> Optional[Nemesis]:
    """Build the live nemesis for a ref; the absent ref stays absent."""
    if ref is ABSENT:
        return None
    return ref.resolve(rng)
