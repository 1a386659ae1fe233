"""Authoritative state of a single two-player game.

A ``Room`` owns its players, settings, guess history and a tagged ``state``
(``Waiting``, ``Picking``, ``Playing(turn)``, ``Finished(winner)``). The
methods here apply the game rules and raise ``GameError`` subclasses for
rejections that must reach the client. Commands that are merely out of phase
or out of turn return a falsy value and leave the room untouched.

Rooms do not lock themselves: callers hold ``room.lock`` around every read and
mutation (see ``SessionEngine``).
"""

import threading
import time
from dataclasses import dataclass
from typing import ClassVar, List, Optional

from .errors import AlreadyInRoom, InvalidSettings, InvalidTransition, NameTaken, OutOfRange, RoomFull
from .evaluation import CORRECT, evaluate_guess

WAITING = 'waiting'
PICKING = 'picking'
PLAYING = 'playing'
FINISHED = 'finished'
STATUS_ORDER = (WAITING, PICKING, PLAYING, FINISHED)


@dataclass(frozen=True)
class Waiting:
    name: ClassVar[str] = WAITING


@dataclass(frozen=True)
class Picking:
    name: ClassVar[str] = PICKING


@dataclass(frozen=True)
class Playing:
    turn: str
    name: ClassVar[str] = PLAYING


@dataclass(frozen=True)
class Finished:
    winner: str
    name: ClassVar[str] = FINISHED


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class RoomSettings:
    min: int
    max: int

    def __post_init__(self):
        if not (_is_int(self.min) and _is_int(self.max)):
            raise InvalidSettings()
        if self.min >= self.max:
            raise InvalidSettings(f'min ({self.min}) must be lower than max ({self.max})')

    def contains(self, number: int) -> bool:
        return self.min <= number <= self.max

    def to_dict(self):
        return {'min': self.min, 'max': self.max}


class Guess:
    def __init__(self, value: int, feedback: str, was_lie: bool, timestamp: int, author_id: str):
        self.value = value
        self.feedback = feedback
        self.was_lie = was_lie
        self.timestamp = timestamp
        self.author_id = author_id

    def to_dict(self, include_lie=False):
        data = {
            'value': self.value,
            'feedback': self.feedback,
            'timestamp': self.timestamp,
            'authorId': self.author_id,
        }
        if include_lie:
            data['wasLie'] = self.was_lie
        return data


class Player:
    def __init__(self, connection_id: str, identity: str, display_name: str):
        self.connection_id = connection_id
        self.identity = identity
        self.display_name = display_name
        self.secret_number: Optional[int] = None
        self.has_used_lie = False
        self.guesses: List[Guess] = []

    @property
    def has_secret_number(self) -> bool:
        return self.secret_number is not None


class Room:
    MAX_PLAYERS = 2

    def __init__(self, code: str, settings: RoomSettings, host: Player, is_public: bool = False):
        self.code = code
        self.settings = settings
        self.is_public = bool(is_public)
        self.host_display_name = host.display_name
        self.players: List[Player] = [host]
        self.state = Waiting()
        # Set once the leaderboard has been told about the outcome
        self.results_recorded = False
        # Set when the room is torn down; late commands holding a reference must no-op
        self.closed = False
        self.lock = threading.RLock()
        self._last_timestamp = 0

    def __repr__(self):
        return f'<Room {self.code} {self.status} players={len(self.players)}>'

    @property
    def status(self) -> str:
        return self.state.name

    @property
    def turn_connection_id(self) -> Optional[str]:
        return self.state.turn if isinstance(self.state, Playing) else None

    @property
    def winner_display_name(self) -> Optional[str]:
        return self.state.winner if isinstance(self.state, Finished) else None

    @property
    def is_listed(self) -> bool:
        """Whether the lobby directory should show this room."""
        return self.is_public and not self.closed and isinstance(self.state, Waiting)

    def player(self, connection_id: str) -> Optional[Player]:
        for p in self.players:
            if p.connection_id == connection_id:
                return p
        return None

    def opponent_of(self, connection_id: str) -> Optional[Player]:
        for p in self.players:
            if p.connection_id != connection_id:
                return p
        return None

    def _advance(self, new_state) -> None:
        current = STATUS_ORDER.index(self.status)
        target = STATUS_ORDER.index(new_state.name)
        if target != current + 1:
            raise InvalidTransition(f'{self.code}: {self.status} -> {new_state.name}')
        self.state = new_state

    def _next_timestamp(self) -> int:
        ts = max(time.monotonic_ns(), self._last_timestamp + 1)
        self._last_timestamp = ts
        return ts

    def seat(self, player: Player) -> None:
        """Seat a second player. Moves the room to picking once it is full."""
        if len(self.players) >= self.MAX_PLAYERS or not isinstance(self.state, Waiting):
            raise RoomFull()
        if self.player(player.connection_id):
            raise AlreadyInRoom()
        if any(p.display_name == player.display_name for p in self.players):
            raise NameTaken(f"'{player.display_name}' is already seated in room {self.code}")
        self.players.append(player)
        if len(self.players) == self.MAX_PLAYERS:
            self._advance(Picking())

    def pick(self, connection_id: str, number: int) -> bool:
        """Store a player's secret number. Returns False when ignored."""
        if not isinstance(self.state, Picking):
            return False
        player = self.player(connection_id)
        if player is None or player.has_secret_number:
            return False
        if not self.settings.contains(number):
            raise OutOfRange(f'{number} is outside {self.settings.min}-{self.settings.max}')
        player.secret_number = number
        if all(p.has_secret_number for p in self.players):
            self._advance(Playing(turn=self.players[0].connection_id))
        return True

    def guess(self, connection_id: str, value: int, lie: bool = False) -> Optional[Guess]:
        """Evaluate a guess from the turn holder. Returns None when ignored."""
        if not isinstance(self.state, Playing) or self.state.turn != connection_id:
            return None
        player = self.player(connection_id)
        opponent = self.opponent_of(connection_id)
        if player is None or opponent is None or not opponent.has_secret_number:
            return None

        feedback, lie_consumed = evaluate_guess(
            value, opponent.secret_number, lie_requested=bool(lie), lie_available=not player.has_used_lie
        )
        if lie_consumed:
            player.has_used_lie = True
        guess = Guess(value, feedback, lie_consumed, self._next_timestamp(), player.connection_id)
        player.guesses.append(guess)

        if feedback == CORRECT:
            self._advance(Finished(winner=player.display_name))
        else:
            self.state = Playing(turn=opponent.connection_id)
        return guess
