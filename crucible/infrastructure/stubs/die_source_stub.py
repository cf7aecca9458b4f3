"""Scripted die source for development and testing.

WARNING: This stub is for development/testing only.
Production should use SystemDieSource.
"""

from __future__ import annotations

from collections.abc import Iterable

from crucible.application.ports.die_source import DieSourceProtocol


class DieSourceStub(DieSourceProtocol):
    """Returns scripted values in order, then `default` forever.

    Attributes:
        rolls: Every value returned so far.
    """

    def __init__(self, values: Iterable[int] = (), *, default: int = 1) -> None:
        self._queue: list[int] = list(values)
        self._default = default
        self.rolls: list[int] = []

    async def roll_d6(self) -> int:
        value = self._queue.pop(0) if self._queue else self._default
        self.rolls.append(value)
        return value

    def queue(self, *values: int) -> None:
        self._queue.extend(values)
