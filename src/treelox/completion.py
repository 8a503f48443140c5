from dataclasses import dataclass
from enum import Enum, auto
from typing import Any


class Signal(Enum):
    NORMAL = auto()
    RETURN = auto()
    BREAK = auto()
    CONTINUE = auto()


@dataclass(frozen=True)
class Completion:
    """How a statement finished executing.

    Blocks hand any non-normal completion up to their enclosing construct:
    loops consume BREAK and CONTINUE, function calls consume RETURN and take
    ``value`` as their result.
    """
    signal: Signal
    value: Any = None

    @property
    def normal(self) -> bool:
        return self.signal is Signal.NORMAL


NORMAL = Completion(Signal.NORMAL)
BREAK = Completion(Signal.BREAK)
CONTINUE = Completion(Signal.CONTINUE)


def returned(value: Any) -> Completion:
    return Completion(Signal.RETURN, value)
