"""
Engine executor — the per-operation loops over targets.

Targets are processed strictly one after another. Every command goes
through an ``Adapter``; the receipt it returns is classified here:

    resolution / execution failure  → recoverable with ``force``
                                      (ver, checklatest, install only)
    cancellation                    → always fatal
    any failure during update       → always fatal

Fatal failures raise ``OperationError``; recoverable ones print a
``warn:`` line and the loop moves on to the next target.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

import click

from pkgctl.adapters.base import Adapter, ExecutionContext
from pkgctl.core.engine.planner import UpdateDecision, pending_updates, plan_updates
from pkgctl.core.models.action import Receipt
from pkgctl.core.models.command_set import NamedCommandSet, Operation

logger = logging.getLogger(__name__)

Echo = Callable[[str], None]


@dataclass(frozen=True)
class RunOptions:
    """Switches that apply to a whole run."""

    verbose: bool = False   # mirror child stdout live
    force: bool = False     # continue past recoverable failures


class OperationError(Exception):
    """A failed target command that aborts the run."""

    def __init__(self, receipt: Receipt, action: str | None = None):
        self.receipt = receipt
        self.action = action or receipt.operation.value
        super().__init__(f"{self.action} {receipt.target!r}: {receipt.error}")

    @property
    def recoverable(self) -> bool:
        return self.receipt.error_kind in ("resolution", "execution")

    @property
    def cancelled(self) -> bool:
        return self.receipt.cancelled


@dataclass
class VersionMaps:
    """Versions collected during one run, keyed by target name."""

    current: dict[str, str] = field(default_factory=dict)
    latest: dict[str, str] = field(default_factory=dict)


class OperationRunner:
    """Runs one operation across an ordered list of targets."""

    def __init__(
        self,
        adapter: Adapter,
        config_dir: Path,
        pins: dict[str, str] | None = None,
        options: RunOptions | None = None,
        echo: Echo = click.echo,
    ):
        self.adapter = adapter
        self.config_dir = config_dir
        self.pins = pins or {}
        self.options = options or RunOptions()
        self.echo = echo
        self.versions = VersionMaps()
        self.decisions: list[UpdateDecision] = []
        self.warnings: list[str] = []

    # ── Plumbing ───────────────────────────────────────────────────

    def _exec(
        self,
        target: NamedCommandSet,
        operation: Operation,
        version: str = "",
        verbose: bool = False,
    ) -> Receipt:
        context = ExecutionContext(
            config_dir=self.config_dir,
            target=target,
            operation=operation,
            version=version,
            verbose=verbose,
        )
        return self.adapter.execute(context)

    def _check(self, receipt: Receipt, action: str | None = None, forceable: bool = True) -> bool:
        """Raise for fatal failures; warn and return False for forced ones."""
        if receipt.ok:
            return True
        err = OperationError(receipt, action)
        if forceable and self.options.force and err.recoverable:
            logger.warning("Continuing after failure: %s", err)
            self.warnings.append(str(err))
            self.echo(f"warn: failed: {err}")
            return False
        raise err

    # ── ver / checklatest ──────────────────────────────────────────

    def collect(self, targets: list[NamedCommandSet], operation: Operation) -> dict[str, str]:
        """Run ``ver`` or ``checklatest`` for every target.

        Returns the trimmed output per target. With ``force`` a failed
        target is recorded with whatever it printed (usually nothing).
        """
        if operation is Operation.VER:
            versions = self.versions.current
        elif operation is Operation.CHECKLATEST:
            versions = self.versions.latest
        else:
            raise ValueError(f"collect() does not handle {operation}")

        for target in targets:
            receipt = self._exec(target, operation)
            self._check(receipt)
            versions[target.name] = receipt.version
        return versions

    # ── install ────────────────────────────────────────────────────

    def install(self, targets: list[NamedCommandSet]) -> None:
        """Install every target that ``ver`` says is not installed yet."""
        for target in targets:
            name = target.name
            self.echo(f'installing "{name}"...\n')

            receipt = self._exec(target, Operation.VER)
            if receipt.ok:
                self.echo(
                    f'Skipping "{name}": seems already installed at version {receipt.version}'
                )
                continue
            if receipt.cancelled:
                raise OperationError(receipt)

            receipt = self._exec(target, Operation.CHECKLATEST)
            version = receipt.version
            if receipt.cancelled:
                raise OperationError(receipt)
            if receipt.failed:
                version = ""
                self.echo(
                    f"\nfetching latest version failed with err {receipt.error}\n"
                    "Now trying with no version specified"
                )

            receipt = self._exec(
                target,
                Operation.INSTALL,
                version=self.pins.get(name) or version,
                verbose=self.options.verbose,
            )
            if self._check(receipt):
                self.echo(f'\n\ninstalling "{name}" done!')

    # ── update ─────────────────────────────────────────────────────

    def gather(self, targets: list[NamedCommandSet]) -> VersionMaps:
        """Current and latest version of every target. Any failure is fatal."""
        for target in targets:
            receipt = self._exec(target, Operation.VER, verbose=self.options.verbose)
            self._check(receipt, forceable=False)
            self.versions.current[target.name] = receipt.version

            receipt = self._exec(target, Operation.CHECKLATEST, verbose=self.options.verbose)
            self._check(receipt, forceable=False)
            self.versions.latest[target.name] = receipt.version
        return self.versions

    def update(self, targets: list[NamedCommandSet]) -> list[UpdateDecision]:
        """Gather versions, plan, then update the targets that need it.

        Updates run in enumeration order. The first failure aborts the
        run; updates already applied stay applied.
        """
        self.gather(targets)

        self.decisions = plan_updates(
            (t.name for t in targets),
            self.versions.current,
            self.versions.latest,
            self.pins,
        )
        for decision in self.decisions:
            self.echo(decision.describe())

        by_name = {t.name: t for t in targets}
        for decision in pending_updates(self.decisions):
            self.echo(f'updating "{decision.name}"...\n')
            receipt = self._exec(
                by_name[decision.name],
                Operation.UPDATE,
                version=decision.target,
                verbose=self.options.verbose,
            )
            self._check(receipt, action="updating", forceable=False)
            self.echo(f'\n\nupdated "{decision.name}"!')

        return self.decisions
