"""
Tests for the engine loops — ver/checklatest, install, update.

These use the MockAdapter, so no processes are spawned.
"""

from pathlib import Path

import pytest

from pkgctl.adapters.mock import MockAdapter
from pkgctl.core.engine.executor import OperationError, OperationRunner, RunOptions
from pkgctl.core.models import NamedCommandSet, Operation

TARGETS = [NamedCommandSet(name="a"), NamedCommandSet(name="b"), NamedCommandSet(name="c")]


def _runner(mock: MockAdapter, pins=None, force=False, verbose=False):
    lines: list[str] = []
    runner = OperationRunner(
        adapter=mock,
        config_dir=Path("/cfg"),
        pins=pins or {},
        options=RunOptions(verbose=verbose, force=force),
        echo=lines.append,
    )
    return runner, lines


class TestCollect:
    def test_versions_trimmed(self):
        mock = MockAdapter()
        mock.set_output("a", Operation.VER, "1.0\n")
        mock.set_output("b", Operation.VER, "  2.0  ")
        mock.set_output("c", Operation.VER, "3.0")
        runner, _ = _runner(mock)
        assert runner.collect(TARGETS, Operation.VER) == {"a": "1.0", "b": "2.0", "c": "3.0"}
        assert runner.versions.latest == {}

    def test_checklatest_fills_latest(self):
        mock = MockAdapter(default_output="9.9\n")
        runner, _ = _runner(mock)
        runner.collect(TARGETS, Operation.CHECKLATEST)
        assert runner.versions.latest == {"a": "9.9", "b": "9.9", "c": "9.9"}
        assert all(not c.verbose for c in mock.call_log)

    def test_failure_is_fatal_without_force(self):
        mock = MockAdapter(default_output="1")
        mock.set_failure("b", Operation.VER)
        runner, _ = _runner(mock)
        with pytest.raises(OperationError, match="ver 'b'") as exc:
            runner.collect(TARGETS, Operation.VER)
        assert exc.value.recoverable
        assert [c.target_name for c in mock.call_log] == ["a", "b"]

    def test_force_warns_and_continues(self):
        mock = MockAdapter(default_output="1")
        mock.set_failure("b", Operation.VER, error="command not found", error_kind="resolution")
        runner, lines = _runner(mock, force=True)
        versions = runner.collect(TARGETS, Operation.VER)
        assert versions == {"a": "1", "b": "", "c": "1"}
        assert lines == ["warn: failed: ver 'b': command not found"]
        assert runner.warnings == ["ver 'b': command not found"]

    def test_cancellation_ignores_force(self):
        mock = MockAdapter()
        mock.set_failure("a", Operation.VER, error="cancelled", error_kind="cancelled")
        runner, _ = _runner(mock, force=True)
        with pytest.raises(OperationError) as exc:
            runner.collect(TARGETS, Operation.VER)
        assert exc.value.cancelled
        assert not exc.value.recoverable
        assert mock.call_count == 1

    def test_rejects_other_operations(self):
        runner, _ = _runner(MockAdapter())
        with pytest.raises(ValueError):
            runner.collect(TARGETS, Operation.INSTALL)


class TestInstall:
    def test_already_installed_skipped(self):
        """ver succeeds → no install invocation."""
        mock = MockAdapter()
        mock.set_output("x", Operation.VER, "1.2.3\n")
        runner, lines = _runner(mock)
        runner.install([NamedCommandSet(name="x")])
        assert mock.calls(Operation.INSTALL) == []
        assert mock.calls(Operation.CHECKLATEST) == []
        assert 'Skipping "x": seems already installed at version 1.2.3' in lines

    def test_installs_fetched_version(self):
        mock = MockAdapter()
        mock.set_failure("x", Operation.VER)
        mock.set_output("x", Operation.CHECKLATEST, "4.0\n")
        runner, lines = _runner(mock, verbose=True)
        runner.install([NamedCommandSet(name="x")])
        (call,) = mock.calls(Operation.INSTALL)
        assert call.version == "4.0"
        assert call.verbose
        assert lines[-1] == '\n\ninstalling "x" done!'

    def test_checklatest_failure_installs_without_version(self):
        mock = MockAdapter()
        mock.set_failure("x", Operation.VER)
        mock.set_failure("x", Operation.CHECKLATEST, error="exit status 7")
        runner, lines = _runner(mock)
        runner.install([NamedCommandSet(name="x")])
        (call,) = mock.calls(Operation.INSTALL)
        assert call.version == ""
        assert any("fetching latest version failed with err exit status 7" in l for l in lines)

    def test_pin_overrides_fetched(self):
        mock = MockAdapter()
        mock.set_failure("x", Operation.VER)
        mock.set_output("x", Operation.CHECKLATEST, "4.0")
        runner, _ = _runner(mock, pins={"x": "3.9"})
        runner.install([NamedCommandSet(name="x")])
        assert mock.calls(Operation.INSTALL)[0].version == "3.9"

    def test_install_failure_fatal(self):
        mock = MockAdapter()
        for t in TARGETS:
            mock.set_failure(t.name, Operation.VER)
        mock.set_failure("a", Operation.INSTALL)
        runner, _ = _runner(mock)
        with pytest.raises(OperationError, match="install 'a'"):
            runner.install(TARGETS)
        assert [c.target_name for c in mock.calls(Operation.INSTALL)] == ["a"]

    def test_install_failure_forced(self):
        mock = MockAdapter()
        for t in TARGETS:
            mock.set_failure(t.name, Operation.VER)
        mock.set_failure("a", Operation.INSTALL)
        runner, lines = _runner(mock, force=True)
        runner.install(TARGETS)
        assert [c.target_name for c in mock.calls(Operation.INSTALL)] == ["a", "b", "c"]
        assert "warn: failed: install 'a': exit status 1" in lines

    def test_cancel_during_ver_aborts(self):
        mock = MockAdapter()
        mock.set_failure("a", Operation.VER, error="cancelled", error_kind="cancelled")
        runner, _ = _runner(mock, force=True)
        with pytest.raises(OperationError):
            runner.install(TARGETS)
        assert mock.call_count == 1


class TestUpdate:
    def test_gather_then_update_changed_only(self):
        mock = MockAdapter()
        mock.set_output("a", Operation.VER, "1.0")
        mock.set_output("a", Operation.CHECKLATEST, "1.1")
        mock.set_output("b", Operation.VER, "2.0")
        mock.set_output("b", Operation.CHECKLATEST, "2.0")
        mock.set_output("c", Operation.VER, "3.0")
        mock.set_output("c", Operation.CHECKLATEST, "3.2")
        runner, lines = _runner(mock)

        decisions = runner.update(TARGETS)

        assert [d.needs_update for d in decisions] == [True, False, True]
        updates = mock.calls(Operation.UPDATE)
        assert [(c.target_name, c.version) for c in updates] == [("a", "1.1"), ("c", "3.2")]
        ops = [c.operation for c in mock.call_log]
        assert ops[:6] == [Operation.VER, Operation.CHECKLATEST] * 3
        assert '"b": 2.0 -> 2.0: no update' in lines
        assert 'updated "c"!' in lines[-1]

    def test_pin_wins_and_skips(self):
        """pin 2.0.0, latest 2.3.1, current 2.0.0 → no update."""
        mock = MockAdapter()
        mock.set_output("bar", Operation.VER, "2.0.0\n")
        mock.set_output("bar", Operation.CHECKLATEST, "2.3.1\n")
        runner, lines = _runner(mock, pins={"bar": "2.0.0"})
        (decision,) = runner.update([NamedCommandSet(name="bar")])
        assert decision.target == "2.0.0"
        assert decision.pinned
        assert mock.calls(Operation.UPDATE) == []
        assert lines == ['"bar": 2.0.0 -> 2.0.0(pinned): no update']

    def test_gather_failure_fatal_even_with_force(self):
        mock = MockAdapter(default_output="1")
        mock.set_failure("b", Operation.CHECKLATEST)
        runner, _ = _runner(mock, force=True)
        with pytest.raises(OperationError, match="checklatest 'b'"):
            runner.update(TARGETS)
        assert mock.calls(Operation.UPDATE) == []

    def test_update_failure_keeps_earlier_updates(self):
        mock = MockAdapter()
        for t in TARGETS:
            mock.set_output(t.name, Operation.VER, "1")
            mock.set_output(t.name, Operation.CHECKLATEST, "2")
        mock.set_failure("b", Operation.UPDATE)
        runner, lines = _runner(mock, force=True)
        with pytest.raises(OperationError, match="updating 'b'"):
            runner.update(TARGETS)
        assert [c.target_name for c in mock.calls(Operation.UPDATE)] == ["a", "b"]
        assert '\n\nupdated "a"!' in lines

    def test_verbose_streams_gathering(self):
        mock = MockAdapter(default_output="1")
        runner, _ = _runner(mock, verbose=True)
        runner.update(TARGETS[:1])
        assert all(c.verbose for c in mock.call_log)
