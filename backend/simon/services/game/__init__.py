"""Game domain services: sequence engine, difficulty, statistics and timers.

Nothing in here knows about HTTP or Socket.IO; routes and socket handlers
reach the engine through ``get_engine`` and the engine reaches the browser
through a presenter.
"""

import threading

from flask import current_app

from .difficulty import Difficulty, DifficultyProfile, UnknownDifficultyError, get_profile, list_profiles
from .engine import GameEngine, InputResult, Phase
from .scheduler import ManualScheduler, SocketIOScheduler
from .signals import Signal, parse_signal
from .stats import Statistics
from .store import MemoryStatsStore, SqlStatsStore

ENGINE_EXTENSION_KEY = 'simon_engine'
ENGINE_FACTORY_KEY = 'simon_engine_factory'

_engine_lock = threading.Lock()


def build_engine(app, presenter, scheduler, store=None) -> GameEngine:
    cfg = app.config
    if store is None:
        store = SqlStatsStore(app, key=cfg.get('STATS_KEY', 'simonGameStats'))
    return GameEngine(
        presenter=presenter,
        store=store,
        scheduler=scheduler,
        difficulty=cfg.get('DEFAULT_DIFFICULTY', 'medium'),
        logger=app.logger,
        start_delay_ms=int(cfg.get('START_DELAY_MS', 1000)),
        next_round_delay_ms=int(cfg.get('NEXT_ROUND_DELAY_MS', 1000)),
        input_ack_ms=int(cfg.get('INPUT_ACK_MS', 400)),
    )


def get_engine(app=None) -> GameEngine:
    """Return the app's engine, building it on first use.

    Built lazily so that statistics are loaded once the tables exist.
    """
    app = app or current_app._get_current_object()
    engine = app.extensions.get(ENGINE_EXTENSION_KEY)
    if engine is None:
        with _engine_lock:
            engine = app.extensions.get(ENGINE_EXTENSION_KEY)
            if engine is None:
                engine = app.extensions[ENGINE_FACTORY_KEY]()
                app.extensions[ENGINE_EXTENSION_KEY] = engine
    return engine
