"""
Fault injectors (nemeses).

Nemeses are registered as deferred references (NemesisRef) and only built
when a test run is materialized.
"""

from .base import Capability, Nemesis, NodeControl, NoopNemesis
from .compose import ComposedNemesis, compose, check_composable
from .registry import (
    ABSENT,
    NEMESES,
    NemesisRef,
    get_nemesis,
    get_nemeses,
    list_nemeses,
    resolve,
)

__all__ = [
    'Capability',
    'Nemesis',
    'NodeControl',
    'NoopNemesis',
    'ComposedNemesis',
    'compose',
    'check_composable',
    'ABSENT',
    'NEMESES',
    'NemesisRef',
    'get_nemesis',
    'get_nemeses',
    'list_nemeses',
    'resolve',
]
