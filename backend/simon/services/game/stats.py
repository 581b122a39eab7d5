from dataclasses import dataclass, fields, replace
import json


# Keys of the stored payload, in the format the browser client has always used
_FIELD_KEYS = {
    'games_played': 'gamesPlayed',
    'total_score': 'totalScore',
    'high_score': 'highScore',
    'current_streak': 'currentStreak',
    'best_streak': 'bestStreak',
}


@dataclass
class Statistics:
    games_played: int = 0
    total_score: int = 0
    high_score: int = 0
    current_streak: int = 0
    best_streak: int = 0

    @property
    def average_score(self) -> float:
        if self.games_played <= 0:
            return 0.0
        return self.total_score / self.games_played

    def record_game(self, score: int) -> 'Statistics':
        """Fold one finished game into the running totals.

        A new high score extends the streak; anything else breaks it.
        """
        self.games_played += 1
        self.total_score += score
        if score > self.high_score:
            self.high_score = score
            self.current_streak += 1
            self.best_streak = max(self.best_streak, self.current_streak)
        else:
            self.current_streak = 0
        return self

    def copy(self) -> 'Statistics':
        return replace(self)

    def to_dict(self):
        data = {key: getattr(self, attr) for attr, key in _FIELD_KEYS.items()}
        data['averageScore'] = self.average_score
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(cls, data) -> 'Statistics':
        """Merge stored data over the defaults.

        Fields that are missing or fail to parse keep their default value.
        ``averageScore`` is always recomputed, never read back.
        """
        stats = cls()
        if not isinstance(data, dict):
            return stats
        for f in fields(cls):
            key = _FIELD_KEYS[f.name]
            raw = data.get(key, data.get(f.name))
            if raw is None or isinstance(raw, bool):
                continue
            try:
                value = int(raw)
            except (TypeError, ValueError):
                continue
            if value < 0:
                continue
            setattr(stats, f.name, value)
        return stats

    @classmethod
    def from_json(cls, payload) -> 'Statistics':
        try:
            data = json.loads(payload) if payload else None
        except (TypeError, ValueError):
            data = None
        return cls.from_dict(data)
