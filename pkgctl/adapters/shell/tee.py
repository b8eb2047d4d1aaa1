"""
Fan-out writer — forward every write to several sinks.

Used to capture a child's stdout into a buffer while mirroring it live
to the terminal in verbose mode.
"""

from __future__ import annotations

from typing import TextIO


class TeeWriter:
    """A minimal text writer that duplicates writes to every sink."""

    def __init__(self, *sinks: TextIO):
        self._sinks = sinks

    def write(self, data: str) -> int:
        for sink in self._sinks:
            sink.write(data)
        return len(data)

    def flush(self) -> None:
        for sink in self._sinks:
            sink.flush()
