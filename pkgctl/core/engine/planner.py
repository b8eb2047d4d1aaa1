"""
Update planner — decide which targets need an update, and to what.

The effective target version of a target is its pinned version when
one is set, otherwise the latest version reported by ``checklatest``.
A target whose current version already equals that is skipped.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UpdateDecision:
    """Planned outcome of ``update`` for one target."""

    name: str
    current: str
    target: str
    pinned: bool = False

    @property
    def needs_update(self) -> bool:
        return self.current != self.target

    def describe(self) -> str:
        """One progress line, e.g. ``"gh": 2.0.0 -> 2.1.0(pinned): no update``."""
        line = f'"{self.name}": {self.current} -> {self.target}'
        if self.pinned:
            line += "(pinned)"
        if not self.needs_update:
            line += ": no update"
        return line

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "current": self.current,
            "target": self.target,
            "pinned": self.pinned,
            "needs_update": self.needs_update,
        }


def effective_version(
    name: str,
    latest: Mapping[str, str],
    pins: Mapping[str, str],
) -> str:
    """Pinned version if present (and non-empty), else the latest version."""
    return pins.get(name) or latest.get(name, "")


def plan_updates(
    names: Iterable[str],
    current: Mapping[str, str],
    latest: Mapping[str, str],
    pins: Mapping[str, str],
) -> list[UpdateDecision]:
    """One decision per target, in the order given."""
    decisions = []
    for name in names:
        decision = UpdateDecision(
            name=name,
            current=current.get(name, ""),
            target=effective_version(name, latest, pins),
            pinned=bool(pins.get(name)),
        )
        if decision.needs_update:
            logger.info("%s: update %s -> %s", name, decision.current, decision.target)
        else:
            logger.info("%s: up to date at %s", name, decision.current)
        decisions.append(decision)
    return decisions


def pending_updates(decisions: Iterable[UpdateDecision]) -> list[UpdateDecision]:
    """The decisions that require running ``update``, order preserved."""
    return [d for d in decisions if d.needs_update]
