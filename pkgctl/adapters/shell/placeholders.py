"""
Placeholder substitution for command templates.

Templates may reference ``${VER}``, ``${OS}`` and ``${ARCH}``. The
replacement is plain string substitution, never a regex.
"""

from __future__ import annotations

import platform
import sys
from collections.abc import Iterable, Mapping

PLACEHOLDER_VER = "${VER}"
PLACEHOLDER_OS = "${OS}"
PLACEHOLDER_ARCH = "${ARCH}"

# platform.machine() spellings → the identifiers release assets use
_ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "aarch64": "arm64",
    "arm64": "arm64",
    "i386": "386",
    "i686": "386",
    "x86": "386",
    "armv6l": "arm",
    "armv7l": "arm",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
    "riscv64": "riscv64",
}


def host_os() -> str:
    """Operating system identifier: linux, darwin, windows, freebsd, ..."""
    if sys.platform.startswith("win"):
        return "windows"
    if sys.platform.startswith("freebsd"):
        return "freebsd"
    return sys.platform


def host_arch() -> str:
    """Architecture identifier: amd64, arm64, 386, arm, ..."""
    machine = platform.machine().lower()
    return _ARCH_ALIASES.get(machine, machine)


def placeholder_values(version: str) -> dict[str, str]:
    """The fixed placeholder dictionary for one invocation."""
    return {
        PLACEHOLDER_VER: version,
        PLACEHOLDER_OS: host_os(),
        PLACEHOLDER_ARCH: host_arch(),
    }


def substitute(args: Iterable[str], values: Mapping[str, str]) -> list[str]:
    """Replace every placeholder occurrence in every token.

    Tokens without placeholders pass through unchanged.
    """
    out: list[str] = []
    for token in args:
        for placeholder, value in values.items():
            token = token.replace(placeholder, value)
        out.append(token)
    return out
