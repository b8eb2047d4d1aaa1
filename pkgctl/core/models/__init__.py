"""
Domain models — Pydantic types for pkgctl.

All models are re-exported here for convenient access:

    from pkgctl.core.models import CommandSet, NamedCommandSet, Operation, Receipt
"""

from pkgctl.core.models.action import Receipt
from pkgctl.core.models.command_set import CommandSet, NamedCommandSet, Operation

__all__ = [
    "CommandSet",
    "NamedCommandSet",
    "Operation",
    "Receipt",
]
