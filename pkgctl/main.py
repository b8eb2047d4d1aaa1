"""
pkgctl — CLI entrypoint.

Usage:
    pkgctl ver                    installed version of every target
    pkgctl checklatest            latest version of every target
    pkgctl gh install             install one target
    pkgctl -v update              update everything, streaming script output
    pkgctl --new gh               scaffold a new target
"""

from __future__ import annotations

import json
import os
import sys

import click

from pkgctl import __version__
from pkgctl.core.models.command_set import Operation
from pkgctl.core.observability.logging_config import resolve_log_level, setup_logging

_OPERATIONS = tuple(op.value for op in Operation)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(version=__version__, prog_name="pkgctl")
@click.option(
    "--dir",
    "config_dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Configuration directory (default: $PKGCTL_DIR or the user config dir).",
)
@click.option("--verbose", "-v", is_flag=True, help="Stream script output while it runs.")
@click.option("--force", "-f", is_flag=True, help="Force option: ignore errors and continue.")
@click.option("--new", "new_name", default=None, metavar="NAME", help="Create command sets for NAME.")
@click.option("--debug", is_flag=True, help="Enable debug logging.")
@click.option(
    "--log-level",
    default=None,
    help="Log level (default: $PKGCTL_LOG_LEVEL, else INFO with -v, else WARNING).",
)
@click.argument("args", nargs=-1)
def cli(
    config_dir: str | None,
    verbose: bool,
    force: bool,
    new_name: str | None,
    debug: bool,
    log_level: str | None,
    args: tuple[str, ...],
) -> None:
    """pkgctl — check, install and update tools through per-target scripts.

    ARGS is either OPERATION (all targets) or TARGET OPERATION, where
    OPERATION is one of ver, checklatest, install, update.
    """
    setup_logging(
        level=resolve_log_level(debug=debug, verbose=verbose, explicit=log_level),
        log_file=os.environ.get("PKGCTL_LOG_FILE"),
        log_file_level=os.environ.get("PKGCTL_LOG_FILE_LEVEL"),
    )

    from pkgctl.core.config.loader import ConfigError, resolve_config_dir

    cfg_dir = resolve_config_dir(config_dir)

    if new_name:
        from pkgctl.core.services.scaffold import scaffold_target

        try:
            created = scaffold_target(cfg_dir, new_name)
        except ConfigError as e:
            click.secho(f"❌ {e}", fg="red", err=True)
            sys.exit(1)
        for path in created:
            click.echo(f"created {path}")
        return

    if len(args) == 2:
        target, op_name = args
    elif len(args) == 1:
        target, op_name = None, args[0]
    else:
        raise click.UsageError(f"wrong args length: want 2 or 1, got {len(args)}")

    if op_name not in _OPERATIONS:
        raise click.UsageError(f"unknown command: must be one of {list(_OPERATIONS)}")

    from pkgctl.core.context import CancelContext, install_signal_handlers
    from pkgctl.core.engine.executor import RunOptions
    from pkgctl.core.use_cases.run import run_operation

    operation = Operation(op_name)
    cancel = CancelContext()
    restore = install_signal_handlers(cancel)
    try:
        result = run_operation(
            operation,
            cfg_dir,
            target=target,
            options=RunOptions(verbose=verbose, force=force),
            cancel=cancel,
        )
    finally:
        restore()

    if result.error:
        click.secho(f"❌ {result.error}", fg="red", err=True)
        sys.exit(130 if result.cancelled else 1)

    if operation in (Operation.VER, Operation.CHECKLATEST):
        click.echo(json.dumps(result.versions, indent=4, sort_keys=True))


if __name__ == "__main__":
    cli()
