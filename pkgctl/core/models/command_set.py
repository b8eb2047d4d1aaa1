"""
Command set model — how a target performs each lifecycle operation.

A command set is loaded from ``<config_dir>/<target>.json``. Each slot
is an argument-vector template; an empty slot means "discover a script
under ``<config_dir>/<target>/`` instead".
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Operation(str, Enum):
    """The four lifecycle operations a target can perform."""

    VER = "ver"
    CHECKLATEST = "checklatest"
    INSTALL = "install"
    UPDATE = "update"

    def __str__(self) -> str:
        return self.value


class CommandSet(BaseModel):
    """Argument templates for one target, one slot per operation."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    ver: list[str] = Field(default_factory=list)
    checklatest: list[str] = Field(default_factory=list)
    install: list[str] = Field(default_factory=list)
    update: list[str] = Field(default_factory=list)

    @field_validator("ver", "checklatest", "install", "update", mode="before")
    @classmethod
    def _null_is_empty(cls, value: object) -> object:
        # "ver": null means discovery mode, same as an omitted slot
        return [] if value is None else value

    def select(self, operation: Operation) -> list[str]:
        """Return the template for an operation (empty = discovery mode)."""
        match operation:
            case Operation.VER:
                return self.ver
            case Operation.CHECKLATEST:
                return self.checklatest
            case Operation.INSTALL:
                return self.install
            case Operation.UPDATE:
                return self.update

    @property
    def is_zero(self) -> bool:
        """True when no operation has a template (script-only target)."""
        return not (self.ver or self.checklatest or self.install or self.update)


class NamedCommandSet(BaseModel):
    """A target name paired with its command set."""

    model_config = ConfigDict(frozen=True)

    name: str
    command_set: CommandSet = Field(default_factory=CommandSet)

    @property
    def script_only(self) -> bool:
        return self.command_set.is_zero
