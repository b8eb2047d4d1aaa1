"""
Mock adapter — test double for the shell adapter.

Returns scripted receipts per (target, operation) and records every
context it receives, so engine loops can be tested without spawning
processes.
"""

from __future__ import annotations

from pkgctl.adapters.base import Adapter, ExecutionContext
from pkgctl.core.models.action import Receipt
from pkgctl.core.models.command_set import Operation


class MockAdapter(Adapter):
    """Scripted adapter. Unscripted calls succeed with ``default_output``."""

    def __init__(self, adapter_name: str = "mock", default_output: str = ""):
        self._name = adapter_name
        self._default_output = default_output
        self._outputs: dict[tuple[str, Operation], str] = {}
        self._failures: dict[tuple[str, Operation], tuple[str, str]] = {}
        self._call_log: list[ExecutionContext] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def call_log(self) -> list[ExecutionContext]:
        """All execution contexts this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def calls(self, operation: Operation) -> list[ExecutionContext]:
        """Contexts received for one operation, in call order."""
        return [c for c in self._call_log if c.operation == operation]

    def set_output(self, target: str, operation: Operation, output: str) -> None:
        self._outputs[(target, operation)] = output

    def set_failure(
        self,
        target: str,
        operation: Operation,
        error: str = "exit status 1",
        error_kind: str = "execution",
    ) -> None:
        self._failures[(target, operation)] = (error, error_kind)

    def execute(self, context: ExecutionContext) -> Receipt:
        self._call_log.append(context)
        key = (context.target_name, context.operation)

        if key in self._failures:
            error, kind = self._failures[key]
            return Receipt.failure(
                context.target_name, context.operation,
                error=error,
                error_kind=kind,  # type: ignore[arg-type]
                metadata={"mock": True},
            )

        return Receipt.success(
            context.target_name, context.operation,
            output=self._outputs.get(key, self._default_output),
            metadata={"mock": True},
        )
