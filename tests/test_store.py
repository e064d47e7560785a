"""Tests for the per-run results store."""

import json

import pytest

from faultline.config import REDACTED
from faultline.core.report import RunRecord, Verdict
from faultline.matrix.materializer import materialize
from faultline.nemesis.registry import get_nemeses
from faultline.store import ResultStore


@pytest.fixture
def stored_run(make_config):
    cfg = make_config()
    cfg.workload.datadog_api_key = 'dd-secret'
    run = materialize(0, 0, 'sets', tuple(get_nemeses(['parts', None])), cfg)
    record = RunRecord(
        index=0,
        name=run.name,
        workload='sets',
        nemeses=run.nemeses,
        valid=False,
        started_at='2024-01-01T00:00:00',
    )
    return run, Verdict(valid=False, detail={'lost': [1, 2]}), record


class TestSave:

    def test_layout(self, tmp_path, stored_run):
        run_dir = ResultStore(tmp_path).save(*stored_run)
        assert run_dir.parent == tmp_path / 'sets-parts'
        assert (run_dir / 'test.json').exists()

        results = json.loads((run_dir / 'results.json').read_text())
        assert results['valid'] is False
        assert results['detail'] == {'lost': [1, 2]}
        assert results['record']['name'] == 'sets-parts'

    def test_secrets_redacted(self, tmp_path, stored_run):
        run_dir = ResultStore(tmp_path).save(*stored_run)
        text = (run_dir / 'test.json').read_text()
        assert 'dd-secret' not in text
        assert REDACTED in text

    def test_write_failure_returns_none(self, tmp_path, stored_run):
        """A store that cannot be written to does not raise."""
        blocker = tmp_path / 'store'
        blocker.write_text('not a directory')
        assert ResultStore(blocker).save(*stored_run) is None


class TestRead:

    def test_list_and_load(self, tmp_path, stored_run):
        store = ResultStore(tmp_path)
        run_dir = store.save(*stored_run)

        runs = store.list_runs()
        assert runs == [{'test': 'sets-parts', 'timestamp': run_dir.name, 'valid': False}]

        loaded = store.load('sets-parts', run_dir.name)
        assert loaded['results']['detail'] == {'lost': [1, 2]}
        assert loaded['test_run']['name'] == 'sets-parts'

    def test_newest_first(self, tmp_path):
        store = ResultStore(tmp_path)
        for stamp, valid in [('20240101T000000.000000', True), ('20240102T000000.000000', False)]:
            run_dir = tmp_path / 'bank-none' / stamp
            run_dir.mkdir(parents=True)
            (run_dir / 'results.json').write_text(json.dumps({'valid': valid}))
        assert [r['valid'] for r in store.list_runs()] == [False, True]

    def test_empty_store(self, tmp_path):
        assert ResultStore(tmp_path / 'missing').list_runs() == []

    def test_unreadable_results_skipped(self, tmp_path):
        run_dir = tmp_path / 'bank-none' / '20240101T000000.000000'
        run_dir.mkdir(parents=True)
        (run_dir / 'results.json').write_text('{broken')
        assert ResultStore(tmp_path).list_runs() == []

    def test_missing_run(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ResultStore(tmp_path).load('bank-none', 'never')

    def test_path_traversal(self, tmp_path):
        (tmp_path / 'store').mkdir()
        (tmp_path / 'secret').mkdir()
        (tmp_path / 'secret' / 'results.json').write_text('{}')
        with pytest.raises(FileNotFoundError):
            ResultStore(tmp_path / 'store').load('..', 'secret')
