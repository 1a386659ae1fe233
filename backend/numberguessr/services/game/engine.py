"""Session engine: applies client commands to rooms and fans out the results.

Every command runs start-to-finish under the room's lock. Outbound messages
are collected while the lock is held and delivered after it is released, so
a slow socket never blocks another command on the same room.
"""

import logging
from typing import List, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError

from .errors import InvalidInput, InvalidSettings, RoomNotFound
from .registry import RoomRegistry
from .room import FINISHED, Player, Room, RoomSettings
from .snapshot import room_snapshot

# Outbound event names
ROOM_JOINED = 'room-joined'
ROOM_UPDATE = 'room-update'
PLAYER_LEFT = 'player-left'
LOBBIES_UPDATE = 'lobbies:update'
LEADERBOARD_UPDATE = 'leaderboard:update'

Outbox = List[Tuple[str, str, dict]]


class SessionEngine:
    def __init__(self, registry: RoomRegistry, leaderboard, notifier, logger=None,
                 default_range: Tuple[int, int] = (1, 100), max_name_length: int = 32):
        self.registry = registry
        self.leaderboard = leaderboard
        self.notifier = notifier
        self.logger = logger or logging.getLogger(__name__)
        self.default_range = default_range
        self.max_name_length = max_name_length

    # ---- helpers ----

    def _clean_name(self, display_name) -> str:
        name = str(display_name or '').strip()
        if not name:
            raise InvalidInput('Display name is required')
        if len(name) > self.max_name_length:
            raise InvalidInput(f'Display name must be at most {self.max_name_length} characters')
        return name

    def _settings(self, settings) -> RoomSettings:
        if settings is None:
            return RoomSettings(*self.default_range)
        if isinstance(settings, RoomSettings):
            return settings
        try:
            return RoomSettings(min=settings['min'], max=settings['max'])
        except (KeyError, TypeError):
            raise InvalidSettings()

    def _fanout(self, room: Room, event: str) -> Outbox:
        """One snapshot per seated player, each with only that player's secret."""
        outbox = []
        for p in room.players:
            snapshot = room_snapshot(room, p.connection_id)
            payload = {'roomId': room.code, 'room': snapshot} if event == ROOM_JOINED else snapshot
            outbox.append((p.connection_id, event, payload))
        return outbox

    def _deliver(self, outbox: Outbox) -> None:
        for connection_id, event, payload in outbox:
            self.notifier.send(connection_id, event, payload)

    def _broadcast_lobbies(self) -> None:
        self.notifier.broadcast(LOBBIES_UPDATE, self.registry.list_public_waiting())

    def _record_results(self, code: str, results) -> None:
        for identity, display_name, won in results:
            try:
                self.leaderboard.record_result(identity, display_name, won)
            except SQLAlchemyError as exc:
                self.logger.error(f"[leaderboard-error] room={code} identity={identity} won={won} error={exc}")

    # ---- commands ----

    def create_room(self, connection_id: str, identity: Optional[str], display_name, settings=None,
                    is_public: bool = False, code: Optional[str] = None) -> dict:
        host = Player(connection_id, identity or connection_id, self._clean_name(display_name))
        room = self.registry.create(host, self._settings(settings), is_public=bool(is_public), code=code)
        with room.lock:
            snapshot = room_snapshot(room, connection_id)
            listed = room.is_listed
        self.logger.info(
            f"[room-create] code={room.code} public={room.is_public} range={room.settings.min}-{room.settings.max} host={host.display_name}"
        )
        self.notifier.send(connection_id, ROOM_JOINED, {'roomId': room.code, 'room': snapshot})
        if listed:
            self._broadcast_lobbies()
        return snapshot

    def join_room(self, connection_id: str, identity: Optional[str], display_name, code) -> dict:
        name = self._clean_name(display_name)
        room = self.registry.get(code)
        if room is None:
            raise RoomNotFound(f'Room {code} not found')
        with room.lock:
            if room.closed:
                raise RoomNotFound(f'Room {code} not found')
            was_listed = room.is_listed
            room.seat(Player(connection_id, identity or connection_id, name))
            lobby_changed = was_listed != room.is_listed
            outbox = self._fanout(room, ROOM_JOINED)
            snapshot = room_snapshot(room, connection_id)
            status = room.status
        self.logger.info(f"[room-join] code={room.code} player={name} status={status}")
        self._deliver(outbox)
        if lobby_changed:
            self._broadcast_lobbies()
        return snapshot

    def pick_number(self, connection_id: str, code, number: int) -> Optional[dict]:
        room = self.registry.get(code)
        if room is None:
            return None
        with room.lock:
            if room.closed or not room.pick(connection_id, number):
                return None
            outbox = self._fanout(room, ROOM_UPDATE)
            snapshot = room_snapshot(room, connection_id)
            status = room.status
        self.logger.info(f"[pick] code={room.code} conn={connection_id} status={status}")
        self._deliver(outbox)
        return snapshot

    def guess(self, connection_id: str, code, value: int, lie: bool = False) -> Optional[dict]:
        room = self.registry.get(code)
        if room is None:
            return None
        results = None
        with room.lock:
            if room.closed:
                return None
            guess = room.guess(connection_id, value, lie=lie)
            if guess is None:
                return None
            outbox = self._fanout(room, ROOM_UPDATE)
            snapshot = room_snapshot(room, connection_id)
            participants = [p.connection_id for p in room.players]
            if room.status == FINISHED and not room.results_recorded:
                room.results_recorded = True
                results = [(p.identity, p.display_name, p.connection_id == connection_id) for p in room.players]
        self.logger.info(
            f"[guess] code={room.code} conn={connection_id} value={value} feedback={guess.feedback} lie={guess.was_lie}"
        )
        self._deliver(outbox)

        if results:
            self.logger.info(f"[finish] code={room.code} winner={room.winner_display_name}")
            self._record_results(room.code, results)
            try:
                board = self.leaderboard.get_all()
            except SQLAlchemyError as exc:
                self.logger.error(f"[leaderboard-error] room={room.code} read failed: {exc}")
            else:
                for cid in participants:
                    self.notifier.send(cid, LEADERBOARD_UPDATE, {'leaderboard': board})
        return snapshot

    def disconnect(self, connection_id: str) -> List[str]:
        """Tear down every room the connection sits in. Returns the removed codes."""
        removed = []
        lobby_changed = False
        for room in self.registry.rooms_for(connection_id):
            with room.lock:
                if room.closed:
                    continue
                lobby_changed = lobby_changed or room.is_listed
                room.closed = True
                leaving = room.player(connection_id)
                others = [p.connection_id for p in room.players if p.connection_id != connection_id]
                self.registry.remove(room.code)
            removed.append(room.code)
            self.logger.info(f"[room-close] code={room.code} left={leaving.display_name if leaving else connection_id}")
            notice = {
                'roomId': room.code,
                'connectionId': connection_id,
                'displayName': leaving.display_name if leaving else None,
            }
            for cid in others:
                self.notifier.send(cid, PLAYER_LEFT, notice)
        if lobby_changed:
            self._broadcast_lobbies()
        return removed

    # ---- reads ----

    def list_public_lobbies(self) -> List[dict]:
        return self.registry.list_public_waiting()

    def get_leaderboard(self) -> List[dict]:
        return self.leaderboard.get_all()

    def room_view(self, code, viewer_id: Optional[str] = None) -> Optional[dict]:
        room = self.registry.get(code)
        if room is None:
            return None
        with room.lock:
            if room.closed:
                return None
            return room_snapshot(room, viewer_id)
