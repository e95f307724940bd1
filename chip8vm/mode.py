"""
Execution mode of the machine.

Running      - the driver may execute the next instruction
WaitForKey   - Fx0A is blocking until a key is released; the released key
               index is written into `register`
Paused       - nothing executes except a single externally requested step
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Mode:
    """Base class of the three execution modes"""

    label = "?"

    def __str__(self):
        return self.label


@dataclass(frozen=True)
class Running(Mode):
    label = "RUNNING"


@dataclass(frozen=True)
class Paused(Mode):
    label = "PAUSED"


@dataclass(frozen=True)
class WaitForKey(Mode):
    register: int

    label = "GETKEY"

    def __str__(self):
        return f"{self.label} V{self.register:X}"


RUNNING = Running()
PAUSED = Paused()
