"""
Run use case — execute one lifecycle operation across targets.

This is the vertical slice from user intent to results: resolve the
config directory, load pins, enumerate targets, run the operation and
collect versions and update decisions.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import TextIO

import click

from pkgctl.adapters.base import Adapter
from pkgctl.core.config.loader import ConfigError, load_pinned_versions
from pkgctl.core.context import CancelContext
from pkgctl.core.engine.executor import Echo, OperationError, OperationRunner, RunOptions
from pkgctl.core.engine.planner import UpdateDecision
from pkgctl.core.models.command_set import Operation
from pkgctl.core.services.targets import enumerate_targets

logger = logging.getLogger(__name__)


@dataclass
class RunResult:
    """Result of running one operation."""

    operation: Operation
    config_dir: Path
    targets: list[str] = field(default_factory=list)
    current_versions: dict[str, str] = field(default_factory=dict)
    latest_versions: dict[str, str] = field(default_factory=dict)
    decisions: list[UpdateDecision] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    error: str | None = None
    cancelled: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def versions(self) -> dict[str, str]:
        """The version map ``ver`` / ``checklatest`` report."""
        if self.operation is Operation.CHECKLATEST:
            return self.latest_versions
        return self.current_versions

    def to_dict(self) -> dict:
        result: dict = {
            "operation": self.operation.value,
            "config_dir": str(self.config_dir),
            "targets": self.targets,
        }
        if self.error:
            result["error"] = self.error
            result["cancelled"] = self.cancelled
        if self.current_versions:
            result["current"] = self.current_versions
        if self.latest_versions:
            result["latest"] = self.latest_versions
        if self.decisions:
            result["updates"] = [d.to_dict() for d in self.decisions]
        if self.warnings:
            result["warnings"] = self.warnings
        return result


def run_operation(
    operation: Operation,
    config_dir: Path,
    target: str | None = None,
    options: RunOptions | None = None,
    adapter: Adapter | None = None,
    cancel: CancelContext | None = None,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
    echo: Echo = click.echo,
) -> RunResult:
    """Run ``operation`` for one target, or for all targets in ``config_dir``.

    Args:
        operation: The lifecycle operation to run.
        config_dir: Configuration directory holding command sets and scripts.
        target: Optional single target name. None = all targets.
        options: Verbose / force switches.
        adapter: Optional pre-configured adapter (tests). Defaults to a
            shell adapter bound to the given streams and ``cancel``.
        cancel: Cancellation context shared by the whole run.
        stdin, stdout, stderr: Streams for child processes
            (default: the process streams).
        echo: Sink for progress lines.

    Returns:
        RunResult with collected versions and decisions. Fatal errors
        are reported in ``error``; results gathered before the failure
        are kept.
    """
    result = RunResult(operation=operation, config_dir=config_dir)

    # ── Load configuration ───────────────────────────────────────
    try:
        pins = load_pinned_versions(config_dir)
        targets = enumerate_targets(config_dir, target)
    except ConfigError as e:
        result.error = str(e)
        return result

    result.targets = [t.name for t in targets]

    # ── Set up adapter ───────────────────────────────────────────
    if adapter is None:
        from pkgctl.adapters.shell.command import ShellCommandAdapter

        adapter = ShellCommandAdapter(
            stdin=stdin if stdin is not None else sys.stdin,
            stdout=stdout if stdout is not None else sys.stdout,
            stderr=stderr if stderr is not None else sys.stderr,
            cancel=cancel,
        )

    runner = OperationRunner(
        adapter=adapter,
        config_dir=config_dir,
        pins=pins,
        options=options,
        echo=echo,
    )

    # ── Execute ──────────────────────────────────────────────────
    logger.info("Running %s on %d target(s)", operation, len(targets))
    try:
        match operation:
            case Operation.VER | Operation.CHECKLATEST:
                runner.collect(targets, operation)
            case Operation.INSTALL:
                runner.install(targets)
            case Operation.UPDATE:
                runner.update(targets)
    except OperationError as e:
        logger.debug("Run aborted: %s", e)
        result.error = str(e)
        result.cancelled = e.cancelled

    result.current_versions = runner.versions.current
    result.latest_versions = runner.versions.latest
    result.decisions = runner.decisions
    result.warnings = runner.warnings
    return result
