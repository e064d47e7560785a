"""
catalog.py - Built-in workloads

Each constructor takes the run's WorkloadOptions and returns a
TestDefinition. Only the options a workload actually honours are copied
into its definition.
"""

from typing import Callable, Dict

from ..config.schema import WorkloadOptions
from ..core.errors import ConfigurationError, ErrorCode, FaultlineError
from .definition import GeneratorConfig, TestDefinition


WorkloadFn = Callable[[WorkloadOptions], TestDefinition]


def _generator(opts: WorkloadOptions, rate: float = 10.0, final_reads: bool = True) -> GeneratorConfig:
    return GeneratorConfig(
        time_limit=opts.time_limit,
        concurrency=opts.concurrency,
        rate=rate,
        final_reads=final_reads,
    )


def _options(opts: WorkloadOptions, *names: str) -> dict:
    picked = {name: getattr(opts, name) for name in names}
    picked['version'] = opts.version
    picked['wait_for_convergence'] = opts.wait_for_convergence
    if opts.datadog_api_key:
        picked['datadog_api_key'] = opts.datadog_api_key
    return picked


def sets(opts: WorkloadOptions) -> TestDefinition:
    """Concurrent unique inserts into a set, then a final read of every element."""
    return TestDefinition(
        name='sets',
        workload='sets',
        client='set',
        checkers=['set', 'perf'],
        generator=_generator(opts),
        options=_options(opts, 'strong_read'),
    )


def register(opts: WorkloadOptions) -> TestDefinition:
    """Reads, writes and compare-and-set on single keys; checked for linearizability."""
    return TestDefinition(
        name='register',
        workload='register',
        client='register',
        checkers=['linearizable', 'timeline', 'perf'],
        generator=_generator(opts, final_reads=False),
        options=_options(opts, 'strong_read', 'at_query'),
    )


def bank(opts: WorkloadOptions) -> TestDefinition:
    """Transfers between accounts; every read must see the same total balance."""
    return TestDefinition(
        name='bank',
        workload='bank',
        client='bank',
        checkers=['bank', 'perf'],
        generator=_generator(opts),
        options=_options(opts, 'at_query', 'fixed_instances'),
    )


def bank_index(opts: WorkloadOptions) -> TestDefinition:
    """Bank workload whose reads go through an index over the accounts."""
    options = _options(opts, 'at_query', 'fixed_instances', 'serialized_indices')
    options['index_reads'] = True
    return TestDefinition(
        name='bank-index',
        workload='bank',
        client='bank',
        checkers=['bank', 'perf'],
        generator=_generator(opts),
        options=options,
    )


def g2(opts: WorkloadOptions) -> TestDefinition:
    """Predicate-guarded inserts; detects G2 anti-dependency cycles."""
    return TestDefinition(
        name='g2',
        workload='g2',
        client='g2',
        checkers=['g2', 'perf'],
        generator=_generator(opts, rate=50.0, final_reads=False),
        options=_options(opts, 'serialized_indices'),
    )


def internal(opts: WorkloadOptions) -> TestDefinition:
    """Single-transaction read-your-writes and internal consistency checks."""
    return TestDefinition(
        name='internal',
        workload='internal',
        client='internal',
        checkers=['internal', 'perf'],
        generator=_generator(opts, final_reads=False),
        options=_options(opts, 'strong_read'),
    )


def pages(opts: WorkloadOptions) -> TestDefinition:
    """Paginated index reads must observe whole groups of inserted elements."""
    return TestDefinition(
        name='pages',
        workload='pages',
        client='pages',
        checkers=['pages', 'perf'],
        generator=_generator(opts),
        options=_options(opts, 'strong_read', 'serialized_indices'),
    )


WORKLOADS: Dict[str, WorkloadFn] = {
    'sets': sets,
    'register': register,
    'bank': bank,
    'bank-index': bank_index,
    'g2': g2,
    'internal': internal,
    'pages': pages,
}


def get_workload(name: str) -> WorkloadFn:
    """Get a workload constructor by name."""
    if name not in WORKLOADS:
        raise ConfigurationError(FaultlineError(
            code=ErrorCode.E1003_UNKNOWN_WORKLOAD,
            detail=f"{name}. Available: {', '.join(WORKLOADS.keys())}",
        ))
    return WORKLOADS[name]


def list_workloads() -> list:
    """List all available workload names."""
    return list(WORKLOADS.keys())
