from enum import Enum
from typing import Optional


class Signal(str, Enum):
    RED = 'red'
    BLUE = 'blue'
    GREEN = 'green'
    YELLOW = 'yellow'

    @property
    def frequency(self) -> int:
        return SIGNAL_FREQUENCIES[self]

    def to_dict(self):
        return {'name': self.value, 'frequency': self.frequency}


# Tone played by the client for each button (Hz)
SIGNAL_FREQUENCIES = {
    Signal.RED: 220,
    Signal.BLUE: 330,
    Signal.GREEN: 440,
    Signal.YELLOW: 550,
}

GAME_OVER_FREQUENCY = 150

ALL_SIGNALS = tuple(Signal)


def parse_signal(value) -> Optional[Signal]:
    """Return the Signal named by ``value`` or None for anything unrecognised."""
    if isinstance(value, Signal):
        return value
    if not isinstance(value, str):
        return None
    try:
        return Signal(value.strip().lower())
    except ValueError:
        return None
