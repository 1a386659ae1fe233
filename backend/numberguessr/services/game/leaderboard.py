import threading

from sqlalchemy.exc import SQLAlchemyError

from numberguessr.models import LeaderboardEntry


class LeaderboardStore:
    """Cumulative wins/losses per stable player identity.

    Rows are only ever incremented. Writes go through a lock so two games
    finishing at once for the same identity cannot race on the insert.
    """

    def __init__(self, db):
        self.db = db
        self._write_lock = threading.Lock()

    def record_result(self, identity: str, display_name: str, won: bool) -> None:
        with self._write_lock:
            try:
                entry = self.db.session.get(LeaderboardEntry, identity)
                if entry is None:
                    entry = LeaderboardEntry(identity=identity, display_name=display_name, wins=0, losses=0)
                    self.db.session.add(entry)
                entry.display_name = display_name
                if won:
                    entry.wins += 1
                else:
                    entry.losses += 1
                self.db.session.commit()
            except SQLAlchemyError:
                self.db.session.rollback()
                raise

    def get_all(self):
        rows = (
            LeaderboardEntry.query
            .order_by(
                LeaderboardEntry.wins.desc(),
                LeaderboardEntry.losses.asc(),
                LeaderboardEntry.display_name.asc(),
            )
            .all()
        )
        return [row.to_dict() for row in rows]
