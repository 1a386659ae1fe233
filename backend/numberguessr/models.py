from datetime import datetime, timezone

from numberguessr import db


def _utcnow():
    return datetime.now(timezone.utc)


class LeaderboardEntry(db.Model):
    __tablename__ = 'leaderboard'
    # Stable client token, not the socket id
    identity = db.Column(db.String(128), primary_key=True)
    display_name = db.Column(db.String(64), nullable=False)
    wins = db.Column(db.Integer, default=0, nullable=False)
    losses = db.Column(db.Integer, default=0, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    def to_dict(self):
        return {
            'displayName': self.display_name,
            'wins': self.wins,
            'losses': self.losses,
        }
