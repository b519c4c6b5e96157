"""Sequence counter repository interface."""

from abc import ABC, abstractmethod


class SequenceRepository(ABC):
    """
    Named monotonically increasing counters.
    Used to hand out invoice and case numbers without collisions.
    """

    @abstractmethod
    async def increment(self, key: str, floor: int = 0) -> int:
        """
        Atomically advance the counter for key and return the new value.

        The counter is first raised to floor when it is lower, so a counter
        created after numbers were already issued continues from them.
        """
        pass
