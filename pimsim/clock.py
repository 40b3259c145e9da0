"""Crossing between two clock domains running at a fixed ratio."""

__all__ = ["ClockDomainCrosser"]


class ClockDomainCrosser:
    """Calls ``callback`` at the rate of the second clock for each tick of the first.

    ``clock1`` and ``clock2`` start at 1:1 and may be changed to set a ratio.
    """

    def __init__(self, callback):
        self.callback = callback
        self.clock1 = 1
        self.clock2 = 1
        self.counter1 = 0
        self.counter2 = 0

    def update(self):
        """Advance the first clock by one tick."""
        if self.clock1 == self.clock2 and self.callback is not None:
            self.callback()
            return

        self.counter1 += self.clock1
        while self.counter2 < self.counter1:
            self.counter2 += self.clock2
            if self.callback is not None:
                self.callback()

        if self.counter1 == self.counter2:
            self.counter1 = 0
            self.counter2 = 0