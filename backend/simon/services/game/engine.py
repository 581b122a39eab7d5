"""Simon game state machine.

The engine owns the sequence, the round state and the player's statistics.
It never sleeps and never renders: pacing and display belong to the
presenter, delayed transitions go through a scheduler. Every delayed
continuation is tagged with the generation it was scheduled in, and
``reset``/``pause``/a new round bump the generation so late callbacks from
an abandoned round are dropped.
"""

import logging
import random
import threading
from contextlib import contextmanager
from enum import Enum
from typing import List, Optional

from .difficulty import DEFAULT_DIFFICULTY, DifficultyProfile, get_profile
from .signals import ALL_SIGNALS, Signal, parse_signal
from .stats import Statistics


class Phase(str, Enum):
    IDLE = 'idle'
    AWAITING_PLAYBACK = 'awaiting_playback'
    PLAYBACK = 'playback'
    AWAITING_INPUT = 'awaiting_input'
    PAUSED = 'paused'
    GAME_OVER = 'game_over'


RUNNING_PHASES = frozenset({Phase.AWAITING_PLAYBACK, Phase.PLAYBACK, Phase.AWAITING_INPUT})
STARTABLE_PHASES = frozenset({Phase.IDLE, Phase.GAME_OVER})


class InputResult(str, Enum):
    IGNORED = 'ignored'
    CORRECT = 'correct'
    ROUND_COMPLETE = 'round_complete'
    GAME_OVER = 'game_over'


class GameEngine:
    def __init__(
        self,
        presenter,
        store,
        scheduler,
        difficulty=DEFAULT_DIFFICULTY,
        rng: Optional[random.Random] = None,
        logger: Optional[logging.Logger] = None,
        start_delay_ms: int = 1000,
        next_round_delay_ms: int = 1000,
        input_ack_ms: int = 400,
        signals=ALL_SIGNALS,
    ):
        self.presenter = presenter
        self.store = store
        self.scheduler = scheduler
        self.rng = rng or random.Random()
        self.logger = logger or logging.getLogger(__name__)
        self.start_delay_ms = start_delay_ms
        self.next_round_delay_ms = next_round_delay_ms
        self.input_ack_ms = input_ack_ms
        self.signals = tuple(signals)

        self._lock = threading.RLock()
        self._busy = False
        self.profile: DifficultyProfile = get_profile(difficulty)
        self.interval_ms: int = self.profile.initial_interval_ms
        self.phase: Phase = Phase.IDLE
        self.level: int = 0
        self.sequence: List[Signal] = []
        self.inputs: List[Signal] = []
        self.generation: int = 0
        self.last_score: Optional[int] = None
        self._acknowledging = False
        self._ack_token = 0

        self.stats: Statistics = self._load_stats()

    # ---- commands ----

    def start(self) -> bool:
        with self._command('start') as entered:
            if not entered:
                return False
            if self.phase not in STARTABLE_PHASES:
                self.logger.debug(f"[start-ignored] phase={self.phase.value}")
                return False
            self._clear_round()
            self.interval_ms = self.profile.initial_interval_ms
            self.phase = Phase.AWAITING_PLAYBACK
            self._notify('set_input_enabled', False)
            self._notify('show_message', 'Get Ready...', 'info')
            self._schedule(self.start_delay_ms, self._advance_level, 'advance')
            self.logger.info(f"[start] difficulty={self.profile.name} interval={self.interval_ms}ms")
            self._publish_state()
            return True

    def advance_level(self) -> bool:
        with self._command('advance_level') as entered:
            if not entered:
                return False
            if self.phase not in RUNNING_PHASES:
                self.logger.debug(f"[advance-ignored] phase={self.phase.value}")
                return False
            self._advance_level()
            return True

    def report_playback_done(self, generation: int) -> bool:
        """Playback of round ``generation`` finished on the client.

        Reports for any other generation are stale and ignored.
        """
        with self._command('report_playback_done') as entered:
            if not entered:
                return False
            if self.phase != Phase.PLAYBACK:
                self.logger.debug(f"[playback-done-ignored] phase={self.phase.value}")
                return False
            if generation != self.generation:
                self.logger.debug(f"[playback-done-stale] generation={generation} current={self.generation}")
                return False
            self.phase = Phase.AWAITING_INPUT
            self.inputs = []
            self._acknowledging = False
            self._notify('set_input_enabled', True)
            self._notify('show_message', 'Your Turn!', 'user-turn')
            self._publish_state()
            return True

    def submit_input(self, signal) -> InputResult:
        with self._command('submit_input') as entered:
            if not entered:
                return InputResult.IGNORED
            parsed = parse_signal(signal)
            if parsed is None or parsed not in self.signals:
                self.logger.debug(f"[input-ignored] unknown signal={signal!r}")
                return InputResult.IGNORED
            if self.phase != Phase.AWAITING_INPUT or self._acknowledging:
                self.logger.debug(f"[input-ignored] phase={self.phase.value} acknowledging={self._acknowledging}")
                return InputResult.IGNORED

            self.inputs.append(parsed)
            position = len(self.inputs) - 1
            self._notify('play_signal', parsed)

            if parsed != self.sequence[position]:
                self.logger.info(f"[input] level={self.level} position={position} got={parsed.value} expected={self.sequence[position].value}")
                self._game_over()
                return InputResult.GAME_OVER

            if len(self.inputs) == len(self.sequence):
                self.phase = Phase.AWAITING_PLAYBACK
                self._notify('set_input_enabled', False)
                self._notify('show_message', 'Correct! Next Level...', 'success')
                self._schedule(self.next_round_delay_ms, self._advance_level, 'advance')
                self._publish_state()
                return InputResult.ROUND_COMPLETE

            if self.input_ack_ms > 0:
                self._begin_acknowledgement()
            self._publish_state()
            return InputResult.CORRECT

    def set_difficulty(self, name) -> bool:
        """Select the profile for the next game.

        Raises UnknownDifficultyError for unknown names. Ignored while a game
        is running or paused; the running game keeps its timing.
        """
        profile = get_profile(name)
        with self._command('set_difficulty') as entered:
            if not entered:
                return False
            if self.phase not in STARTABLE_PHASES:
                self.logger.debug(f"[difficulty-ignored] phase={self.phase.value} requested={profile.name}")
                return False
            self.profile = profile
            self.interval_ms = profile.initial_interval_ms
            self.logger.info(f"[difficulty] set to {profile.name}")
            self._publish_state()
            return True

    def reset(self) -> bool:
        with self._command('reset') as entered:
            if not entered:
                return False
            self._clear_round()
            self.phase = Phase.IDLE
            self.interval_ms = self.profile.initial_interval_ms
            self._notify('set_input_enabled', False)
            self._notify('show_message', 'Press Space or Start to begin', 'reset')
            self.logger.info(f"[reset] generation={self.generation}")
            self._publish_state()
            return True

    def pause(self) -> bool:
        # No resume: a paused game stays frozen until reset
        with self._command('pause') as entered:
            if not entered or self.phase not in RUNNING_PHASES:
                return False
            self.generation += 1
            self.phase = Phase.PAUSED
            self._acknowledging = False
            self._notify('set_input_enabled', False)
            self._notify('show_message', 'Game Paused', 'paused')
            self.logger.info(f"[pause] level={self.level}")
            self._publish_state()
            return True

    def toggle_sound(self) -> Optional[bool]:
        return self._notify('toggle_sound')

    def flush_stats(self) -> bool:
        with self._command('flush_stats') as entered:
            return entered and self._save_stats()

    # ---- queries ----

    def statistics(self) -> Statistics:
        with self._lock:
            return self.stats.copy()

    def snapshot(self):
        with self._lock:
            return self._snapshot()

    # ---- internals (caller holds the lock) ----

    @contextmanager
    def _command(self, name: str):
        """Serialize commands. A command issued while another one is still
        running on the same thread (a presenter calling back) is refused.
        """
        with self._lock:
            if self._busy:
                self.logger.warning(f"[reentry-ignored] {name}")
                yield False
                return
            self._busy = True
            try:
                yield True
            finally:
                self._busy = False

    def _advance_level(self) -> None:
        self.generation += 1
        self.sequence.append(self.rng.choice(self.signals))
        self.level += 1
        self.interval_ms = self.profile.next_interval(self.interval_ms)
        self.inputs = []
        self._acknowledging = False
        self.phase = Phase.PLAYBACK
        self._notify('set_input_enabled', False)
        self._notify('show_message', f'Level {self.level}', 'level')
        self._notify('play_sequence', list(self.sequence), self.interval_ms, self.generation)
        self.logger.info(f"[level] level={self.level} interval={self.interval_ms}ms")
        self._publish_state()

    def _game_over(self) -> None:
        score = max(0, self.level - 1)
        self.last_score = score
        self.stats.record_game(score)
        self._save_stats()
        self._clear_round()
        self.phase = Phase.GAME_OVER
        self._notify('set_input_enabled', False)
        self._notify('play_game_over')
        self._notify(
            'show_message',
            f'Game Over! Final Score: {score}\nHigh Score: {self.stats.high_score}',
            'game-over',
        )
        self._notify('show_stats', self.stats.to_dict())
        self.logger.info(f"[game-over] score={score} high_score={self.stats.high_score} games={self.stats.games_played}")
        self._publish_state()

    def _clear_round(self) -> None:
        self.generation += 1
        self.sequence = []
        self.inputs = []
        self.level = 0
        self._acknowledging = False

    def _begin_acknowledgement(self) -> None:
        self._acknowledging = True
        self._ack_token += 1
        token = self._ack_token

        def _release():
            with self._command('release_input') as entered:
                if entered and self._ack_token == token:
                    self._acknowledging = False

        self.scheduler.call_later(self.input_ack_ms, _release)

    def _schedule(self, delay_ms: int, action, label: str) -> None:
        expected = self.generation

        def _fire():
            with self._command(label) as entered:
                if not entered:
                    return
                if self.generation != expected:
                    self.logger.debug(f"[timer-abort] {label} generation={expected} current={self.generation}")
                    return
                action()

        self.scheduler.call_later(delay_ms, _fire)

    def _load_stats(self) -> Statistics:
        try:
            loaded = self.store.load() if self.store is not None else None
        except Exception as exc:
            self.logger.warning(f"[stats-load-failed] {exc!r}")
            loaded = None
        return loaded if loaded is not None else Statistics()

    def _save_stats(self) -> bool:
        if self.store is None:
            return False
        try:
            ok = bool(self.store.save(self.stats.copy()))
        except Exception as exc:
            self.logger.warning(f"[stats-save-failed] {exc!r}")
            return False
        if not ok:
            self.logger.warning("[stats-save-failed] store rejected write")
        return ok

    def _notify(self, method: str, *args):
        target = getattr(self.presenter, method, None)
        if target is None:
            return None
        try:
            return target(*args)
        except Exception as exc:
            self.logger.warning(f"[presenter-error] {method}: {exc!r}")
            return None

    def _publish_state(self) -> None:
        self._notify('state_changed', self._snapshot())

    def _snapshot(self):
        return {
            'phase': self.phase.value,
            'level': self.level,
            'sequence': [s.value for s in self.sequence],
            'input_position': len(self.inputs),
            'interval_ms': self.interval_ms,
            'difficulty': self.profile.name,
            'generation': self.generation,
            'accepting_input': self.phase == Phase.AWAITING_INPUT and not self._acknowledging,
            'last_score': self.last_score,
            'stats': self.stats.to_dict(),
        }
