from typing import List, Optional, Protocol

from simon.services.game.signals import GAME_OVER_FREQUENCY, Signal


GAME_ROOM = 'game'
NAMESPACE = '/ws'


class Presenter(Protocol):
    """What the engine needs from whoever draws the board and plays tones."""

    def show_message(self, text: str, kind: str) -> None: ...

    def play_signal(self, signal: Signal) -> None: ...

    def play_sequence(self, sequence: List[Signal], interval_ms: int, generation: int) -> None: ...

    def set_input_enabled(self, enabled: bool) -> None: ...

    def play_game_over(self) -> None: ...

    def show_stats(self, stats: dict) -> None: ...

    def state_changed(self, snapshot: dict) -> None: ...

    def toggle_sound(self) -> bool: ...


class SocketIOPresenter:
    """Forwards presentation requests to the browser over Socket.IO.

    The browser paces playback itself and answers ``play_sequence`` with a
    ``playback_done`` event carrying the same generation.
    """

    def __init__(self, socketio, sound_enabled: bool = True, logger=None):
        self.socketio = socketio
        self.sound_enabled = sound_enabled
        self.logger = logger

    def _emit(self, event: str, payload: dict) -> None:
        try:
            self.socketio.emit(event, payload, to=GAME_ROOM, namespace=NAMESPACE)
        except Exception as exc:
            # Nobody listening (or server not running) must not break the game
            if self.logger is not None:
                self.logger.warning(f"[emit-failed] event={event} error={exc!r}")

    def show_message(self, text: str, kind: str = 'default') -> None:
        self._emit('show_message', {'text': text, 'kind': kind})

    def play_signal(self, signal: Signal) -> None:
        self._emit('play_signal', {
            'signal': signal.value,
            'frequency': signal.frequency,
            'sound': self.sound_enabled,
        })

    def play_sequence(self, sequence: List[Signal], interval_ms: int, generation: int) -> None:
        self._emit('play_sequence', {
            'sequence': [s.value for s in sequence],
            'frequencies': [s.frequency for s in sequence],
            'interval_ms': interval_ms,
            'generation': generation,
            'sound': self.sound_enabled,
        })

    def set_input_enabled(self, enabled: bool) -> None:
        self._emit('input_enabled', {'enabled': bool(enabled)})

    def play_game_over(self) -> None:
        if not self.sound_enabled:
            return
        self._emit('game_over_sound', {'frequency': GAME_OVER_FREQUENCY})

    def show_stats(self, stats: dict) -> None:
        self._emit('stats_update', stats)

    def state_changed(self, snapshot: dict) -> None:
        self._emit('state_update', snapshot)

    def toggle_sound(self) -> bool:
        self.sound_enabled = not self.sound_enabled
        self._emit('sound_toggled', {'enabled': self.sound_enabled})
        return self.sound_enabled

    def disable_sound(self, reason: Optional[str] = None) -> None:
        """Audio is unavailable on the client; keep playing silently."""
        if self.sound_enabled and self.logger is not None:
            self.logger.warning(f"[sound-disabled] {reason or 'audio unavailable'}")
        self.sound_enabled = False
        self._emit('sound_toggled', {'enabled': False})
