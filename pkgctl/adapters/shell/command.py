"""
Shell command adapter — run a target's resolved command as a child process.

This is the only place a target command is spawned. The child's stdout
is always captured; with ``verbose`` it is also mirrored live to the
caller's stdout. Stderr is never captured, it goes straight to the
caller's stderr. The run's ``CancelContext`` is polled while the child
runs and terminates it when set.
"""

from __future__ import annotations

import codecs
import io
import logging
import os
import subprocess
import threading
import time
from typing import IO, Any, TextIO, cast

from pkgctl.adapters.base import Adapter, ExecutionContext
from pkgctl.adapters.shell.placeholders import host_arch, host_os
from pkgctl.adapters.shell.resolver import CommandNotFoundError, resolve_command
from pkgctl.adapters.shell.tee import TeeWriter
from pkgctl.core.context import CancelContext
from pkgctl.core.models.action import Receipt

logger = logging.getLogger(__name__)

_POLL_INTERVAL = 0.05   # seconds between cancellation checks
_KILL_GRACE = 5.0       # seconds between terminate() and kill()
_CHUNK = 64 * 1024


def _fileno(stream: Any) -> int | None:
    """Return the OS-level descriptor of a stream, or None if it has none."""
    if stream is None:
        return None
    try:
        return stream.fileno()
    except (AttributeError, OSError, ValueError, io.UnsupportedOperation):
        return None


def _pump(src: IO[bytes], sink: Any) -> None:
    """Copy a child pipe into a text sink as data arrives."""
    decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
    try:
        while True:
            chunk = src.read1(_CHUNK) if hasattr(src, "read1") else src.read(_CHUNK)
            if not chunk:
                break
            sink.write(decoder.decode(chunk))
            sink.flush()
        tail = decoder.decode(b"", final=True)
        if tail:
            sink.write(tail)
            sink.flush()
    finally:
        src.close()


def _feed(src: TextIO, dst: IO[bytes]) -> None:
    """Copy a caller-supplied text stream into the child's stdin pipe."""
    try:
        data = src.read()
        if data:
            dst.write(data.encode("utf-8") if isinstance(data, str) else data)
    except BrokenPipeError:
        logger.debug("Child closed stdin before reading all input")
    finally:
        try:
            dst.close()
        except BrokenPipeError:
            pass


def child_env(version: str) -> dict[str, str]:
    """Inherited environment plus OS, ARCH and (when set) VER."""
    env = os.environ.copy()
    env["OS"] = host_os()
    env["ARCH"] = host_arch()
    if version:
        env["VER"] = version
    return env


class ShellCommandAdapter(Adapter):
    """Execute target commands against caller-supplied streams.

    One instance is bound to a set of streams and a cancel context; it
    keeps no state between ``execute`` calls.
    """

    def __init__(
        self,
        stdin: TextIO | None,
        stdout: TextIO,
        stderr: TextIO,
        cancel: CancelContext | None = None,
    ):
        self._stdin = stdin
        self._stdout = stdout
        self._stderr = stderr
        self._cancel = cancel or CancelContext()

    @property
    def name(self) -> str:
        return "shell"

    def execute(self, context: ExecutionContext) -> Receipt:
        target = context.target_name
        operation = context.operation

        if self._cancel.cancelled:
            return Receipt.failure(
                target, operation,
                error=f"cancelled: {self._cancel.reason}",
                error_kind="cancelled",
            )

        try:
            argv = resolve_command(
                context.config_dir, context.target, operation, context.version,
            )
        except CommandNotFoundError as e:
            return Receipt.failure(target, operation, error=str(e), error_kind="resolution")

        if not argv:
            return Receipt.failure(
                target, operation, error="command not found", error_kind="resolution",
            )

        logger.debug("Executing %s:%s: %s (ver=%r)", target, operation, argv, context.version)
        start = time.monotonic()

        buf = io.StringIO()
        out_sink: Any = TeeWriter(buf, self._stdout) if context.verbose else buf

        stdin_fd = _fileno(self._stdin)
        stderr_fd = _fileno(self._stderr)

        if self._stdin is None:
            stdin_arg: Any = subprocess.DEVNULL
        elif stdin_fd is not None:
            stdin_arg = stdin_fd
        else:
            stdin_arg = subprocess.PIPE

        try:
            proc = subprocess.Popen(
                argv,
                stdin=stdin_arg,
                stdout=subprocess.PIPE,
                stderr=stderr_fd if stderr_fd is not None else subprocess.PIPE,
                env=child_env(context.version),
            )
        except OSError as e:
            logger.debug("Launch of %s failed: %s", argv[0], e)
            return Receipt.failure(
                target, operation,
                error=str(e),
                error_kind="execution",
                argv=argv,
                duration_ms=int((time.monotonic() - start) * 1000),
            )

        child_stdout = cast(IO[bytes], proc.stdout)
        threads: list[threading.Thread] = [
            threading.Thread(target=_pump, args=(child_stdout, out_sink), daemon=True)
        ]
        if proc.stderr is not None:
            threads.append(
                threading.Thread(target=_pump, args=(proc.stderr, self._stderr), daemon=True)
            )
        if proc.stdin is not None and self._stdin is not None:
            threads.append(
                threading.Thread(target=_feed, args=(self._stdin, proc.stdin), daemon=True)
            )
        for t in threads:
            t.start()

        cancelled = self._wait(proc)

        for t in threads:
            t.join(timeout=_KILL_GRACE if cancelled else None)

        elapsed_ms = int((time.monotonic() - start) * 1000)
        output = buf.getvalue()

        if cancelled:
            return Receipt.failure(
                target, operation,
                error=f"cancelled: {self._cancel.reason}",
                error_kind="cancelled",
                argv=argv,
                output=output,
                return_code=proc.returncode,
                duration_ms=elapsed_ms,
            )

        logger.debug("%s:%s exited %d in %dms", target, operation, proc.returncode, elapsed_ms)

        if proc.returncode != 0:
            return Receipt.failure(
                target, operation,
                error=f"exit status {proc.returncode}",
                error_kind="execution",
                argv=argv,
                output=output,
                return_code=proc.returncode,
                duration_ms=elapsed_ms,
            )

        return Receipt.success(
            target, operation,
            output=output,
            argv=argv,
            return_code=proc.returncode,
            duration_ms=elapsed_ms,
        )

    def _wait(self, proc: subprocess.Popen) -> bool:
        """Wait for the child; terminate it if the run is cancelled.

        Returns True when the run was cancelled, including when the
        child exited on its own after the cancel signal (a terminal
        Ctrl-C reaches both processes).
        """
        while proc.poll() is None:
            if not self._cancel.wait(_POLL_INTERVAL):
                continue
            logger.info("Cancelling pid %d: %s", proc.pid, self._cancel.reason)
            proc.terminate()
            try:
                proc.wait(timeout=_KILL_GRACE)
            except subprocess.TimeoutExpired:
                proc.kill()
                proc.wait()
            return True
        return self._cancel.cancelled
