"""Tests for the workload catalog."""

import pytest

from faultline.config import WorkloadOptions
from faultline.core.errors import ConfigurationError, ErrorCode
from faultline.workloads import WORKLOADS, TestDefinition, get_workload, list_workloads


class TestCatalog:

    def test_registered_workloads(self):
        assert list_workloads() == [
            'sets', 'register', 'bank', 'bank-index', 'g2', 'internal', 'pages',
        ]

    def test_every_workload_builds(self):
        opts = WorkloadOptions()
        for name, fn in WORKLOADS.items():
            test = fn(opts)
            assert isinstance(test, TestDefinition)
            assert test.name == name
            assert test.checkers

    def test_unknown_workload(self):
        with pytest.raises(ConfigurationError) as exc:
            get_workload('ledger')
        assert exc.value.codes == [ErrorCode.E1003_UNKNOWN_WORKLOAD]


class TestOptions:
    """Options flow from WorkloadOptions into definitions."""

    def test_generator_uses_limits(self):
        opts = WorkloadOptions(time_limit=30, concurrency=4)
        test = get_workload('register')(opts)
        assert test.generator.time_limit == 30
        assert test.generator.concurrency == 4
        assert not test.generator.final_reads

    def test_only_honoured_options_copied(self):
        opts = WorkloadOptions(at_query=True, strong_read=False)
        test = get_workload('bank')(opts)
        assert test.options['at_query'] is True
        assert 'strong_read' not in test.options
        assert test.options['version'] == '2.5.5'

    def test_bank_index_reads_through_index(self):
        test = get_workload('bank-index')(WorkloadOptions(serialized_indices=True))
        assert test.workload == 'bank'
        assert test.options['index_reads'] is True
        assert test.options['serialized_indices'] is True

    def test_datadog_key_only_when_set(self):
        assert 'datadog_api_key' not in get_workload('sets')(WorkloadOptions()).options
        keyed = get_workload('sets')(WorkloadOptions(datadog_api_key='k'))
        assert keyed.options['datadog_api_key'] == 'k'

    def test_to_dict(self):
        data = get_workload('g2')(WorkloadOptions()).to_dict()
        assert data['generator']['rate'] == 50.0
        assert data['checkers'] == ['g2', 'perf']
