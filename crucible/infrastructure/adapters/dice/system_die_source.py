"""Die source drawing from OS randomness."""

from __future__ import annotations

import random

from crucible.application.ports.die_source import DieSourceProtocol


class SystemDieSource(DieSourceProtocol):
    """Uniform d6 from random.SystemRandom."""

    def __init__(self) -> None:
        self._random = random.SystemRandom()

    async def roll_d6(self) -> int:
        return self._random.randint(1, 6)
