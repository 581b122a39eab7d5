import logging
import time
from typing import Optional

from .stats import Statistics


DEFAULT_STATS_KEY = 'simonGameStats'


class MemoryStatsStore:
    """Keeps the serialized statistics in a dict. No durability."""

    def __init__(self, key: str = DEFAULT_STATS_KEY):
        self.key = key
        self.slots = {}
        self.fail_saves = False

    def load(self) -> Optional[Statistics]:
        payload = self.slots.get(self.key)
        if payload is None:
            return None
        return Statistics.from_json(payload)

    def save(self, stats: Statistics) -> bool:
        if self.fail_saves:
            return False
        self.slots[self.key] = stats.to_json()
        return True


class SqlStatsStore:
    """Statistics slot persisted in the ``stats_slot`` table.

    Both operations are best-effort: database errors are logged and reported
    as ``None`` / ``False``, never raised.
    """

    def __init__(self, app, key: str = DEFAULT_STATS_KEY):
        self.app = app
        self.key = key

    @property
    def logger(self):
        return getattr(self.app, 'logger', logging.getLogger(__name__))

    def load(self) -> Optional[Statistics]:
        from simon import db
        from simon.models import StatsSlot
        try:
            with self.app.app_context():
                slot = db.session.get(StatsSlot, self.key)
                if slot is None:
                    return None
                return Statistics.from_json(slot.payload)
        except Exception as exc:
            self.logger.warning(f"[stats-load-failed] key={self.key} error={exc!r}")
            return None

    def save(self, stats: Statistics) -> bool:
        from simon import db
        from simon.models import StatsSlot
        with self.app.app_context():
            try:
                slot = db.session.get(StatsSlot, self.key)
                if slot is None:
                    slot = StatsSlot(key=self.key)
                slot.payload = stats.to_json()
                slot.updated_at = time.time()
                db.session.add(slot)
                db.session.commit()
                return True
            except Exception as exc:
                db.session.rollback()
                self.logger.warning(f"[stats-save-failed] key={self.key} error={exc!r}")
                return False

    def clear(self) -> None:
        from simon import db
        from simon.models import StatsSlot
        with self.app.app_context():
            StatsSlot.query.filter_by(key=self.key).delete()
            db.session.commit()
