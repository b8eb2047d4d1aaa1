"""
Adapter base — the contract between the engine and command runners.

The engine only talks to adapters through this protocol. An adapter
receives an ``ExecutionContext`` and returns a ``Receipt``; it never
raises for a failed command.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from pydantic import BaseModel

from pkgctl.core.models.action import Receipt
from pkgctl.core.models.command_set import NamedCommandSet, Operation


class ExecutionContext(BaseModel):
    """Everything an adapter needs to run one operation for one target."""

    config_dir: Path
    target: NamedCommandSet
    operation: Operation
    version: str = ""
    verbose: bool = False

    @property
    def target_name(self) -> str:
        return self.target.name


class Adapter(ABC):
    """Abstract base class for command runners.

    Failures are captured in the Receipt with ``status='failed'`` and an
    ``error_kind`` of resolution, execution or cancelled.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """The adapter identifier (e.g., 'shell', 'mock')."""

    @abstractmethod
    def execute(self, context: ExecutionContext) -> Receipt:
        """Run the operation and return a receipt. MUST never raise."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
