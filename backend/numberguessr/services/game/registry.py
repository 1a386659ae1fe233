import random
import string
import threading
from typing import Dict, List, Optional

from .errors import InvalidInput, RoomAlreadyExists
from .room import Player, Room, RoomSettings

CODE_ALPHABET = string.ascii_uppercase + string.digits


def normalize_code(code) -> str:
    return str(code or '').strip().upper()


class RoomRegistry:
    """Process-wide map of room code -> Room.

    The registry lock only guards the map itself. It is never held while a
    room lock is being acquired, so callers may take a room lock first and
    then add or remove rooms here.
    """

    def __init__(self, code_length: int = 4):
        self.code_length = code_length
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.Lock()

    def __len__(self):
        with self._lock:
            return len(self._rooms)

    def __contains__(self, code):
        return self.get(code) is not None

    def _generate_code(self) -> str:
        while True:
            code = ''.join(random.choices(CODE_ALPHABET, k=self.code_length))
            if code not in self._rooms:
                return code

    def create(self, host: Player, settings: RoomSettings, is_public: bool = False, code: Optional[str] = None) -> Room:
        with self._lock:
            if code is None or normalize_code(code) == '':
                code = self._generate_code()
            else:
                code = normalize_code(code)
                if not code.isalnum():
                    raise InvalidInput('Room code must be alphanumeric')
                if code in self._rooms:
                    raise RoomAlreadyExists(f'Room {code} already exists')
            room = Room(code, settings, host, is_public=is_public)
            self._rooms[code] = room
            return room

    def get(self, code) -> Optional[Room]:
        with self._lock:
            return self._rooms.get(normalize_code(code))

    def remove(self, code) -> Optional[Room]:
        with self._lock:
            return self._rooms.pop(normalize_code(code), None)

    def all(self) -> List[Room]:
        with self._lock:
            return list(self._rooms.values())

    def rooms_for(self, connection_id: str) -> List[Room]:
        found = []
        for room in self.all():
            with room.lock:
                if room.player(connection_id) is not None:
                    found.append(room)
        return found

    def list_public_waiting(self) -> List[dict]:
        """Lobby directory: public rooms that are still waiting for an opponent."""
        lobbies = []
        for room in self.all():
            with room.lock:
                if room.is_listed:
                    lobbies.append({
                        'code': room.code,
                        'playerCount': len(room.players),
                        'hostDisplayName': room.host_display_name,
                    })
        return lobbies
