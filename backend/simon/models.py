from simon import db


class StatsSlot(db.Model):
    """Key/value slot holding one player's JSON-encoded statistics."""
    __tablename__ = 'stats_slot'
    key = db.Column(db.String(64), primary_key=True)
    payload = db.Column(db.Text, nullable=True)
    updated_at = db.Column(db.Float, nullable=True)
