from dataclasses import dataclass
from enum import Enum


class UnknownDifficultyError(ValueError):
    """Raised when a difficulty name does not match any profile."""

    def __init__(self, name):
        super().__init__(f"Unknown difficulty: {name!r}")
        self.name = name


@dataclass(frozen=True)
class DifficultyProfile:
    name: str
    initial_interval_ms: int
    min_interval_ms: int
    interval_decrement_ms: int

    def next_interval(self, current_ms: int) -> int:
        return max(self.min_interval_ms, current_ms - self.interval_decrement_ms)

    def to_dict(self):
        return {
            'name': self.name,
            'initial_interval_ms': self.initial_interval_ms,
            'min_interval_ms': self.min_interval_ms,
            'interval_decrement_ms': self.interval_decrement_ms,
        }


class Difficulty(Enum):
    EASY = DifficultyProfile('easy', 1200, 600, 30)
    MEDIUM = DifficultyProfile('medium', 1000, 400, 50)
    HARD = DifficultyProfile('hard', 800, 300, 70)
    EXPERT = DifficultyProfile('expert', 600, 200, 100)

    @property
    def profile(self) -> DifficultyProfile:
        return self.value


DEFAULT_DIFFICULTY = Difficulty.MEDIUM


def get_profile(name) -> DifficultyProfile:
    """Look up a profile by name (case-insensitive)."""
    if isinstance(name, DifficultyProfile):
        return name
    if isinstance(name, Difficulty):
        return name.profile
    if not isinstance(name, str) or not name.strip():
        raise UnknownDifficultyError(name)
    key = name.strip().lower()
    for difficulty in Difficulty:
        if difficulty.profile.name == key:
            return difficulty.profile
    raise UnknownDifficultyError(name)


def list_profiles():
    return [d.profile for d in Difficulty]
