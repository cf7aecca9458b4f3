"""Die source port definition."""

from abc import ABC, abstractmethod


class DieSourceProtocol(ABC):
    """Abstract protocol for drawing dice.

    Production implementations:
    - SystemDieSource: OS randomness

    Development/Testing:
    - DieSourceStub: scripted rolls
    """

    @abstractmethod
    async def roll_d6(self) -> int:
        """Draw one six-sided die.

        Returns:
            An integer in [1, 6], uniformly distributed.
        """
        ...
