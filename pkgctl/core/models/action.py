"""
Receipt model — the result of running one target command.

The adapter never raises for a failed command: failures are captured
in the Receipt together with an ``error_kind`` so the engine can decide
whether the run may continue.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from pkgctl.core.models.command_set import Operation

ErrorKind = Literal["resolution", "execution", "cancelled"]


class Receipt(BaseModel):
    """Outcome of one command execution for one target."""

    target: str
    operation: Operation
    status: Literal["ok", "failed"] = "ok"
    duration_ms: int = 0

    argv: list[str] = Field(default_factory=list)
    output: str = ""                     # captured stdout, untrimmed
    error: str | None = None
    error_kind: ErrorKind | None = None
    return_code: int | None = None

    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "ok"

    @property
    def failed(self) -> bool:
        return self.status == "failed"

    @property
    def cancelled(self) -> bool:
        return self.error_kind == "cancelled"

    @property
    def version(self) -> str:
        """Captured output with surrounding whitespace removed."""
        return self.output.strip()

    @classmethod
    def success(
        cls,
        target: str,
        operation: Operation,
        output: str = "",
        **kwargs: Any,
    ) -> Receipt:
        """Create a success receipt."""
        return cls(
            target=target,
            operation=operation,
            status="ok",
            output=output,
            **kwargs,
        )

    @classmethod
    def failure(
        cls,
        target: str,
        operation: Operation,
        error: str,
        error_kind: ErrorKind = "execution",
        **kwargs: Any,
    ) -> Receipt:
        """Create a failure receipt."""
        return cls(
            target=target,
            operation=operation,
            status="failed",
            error=error,
            error_kind=error_kind,
            **kwargs,
        )
