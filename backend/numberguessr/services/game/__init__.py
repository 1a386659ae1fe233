"""Game domain services: rooms, lobby directory, guess rules and leaderboard.

This package holds the server-authoritative game logic. Socket handlers and
HTTP routes import the ``SessionEngine`` from here, keeping transport
concerns separated from core game mechanics.
"""

from .engine import SessionEngine
from .errors import (
    AlreadyInRoom,
    GameError,
    InvalidInput,
    InvalidSettings,
    InvalidTransition,
    NameTaken,
    OutOfRange,
    RoomAlreadyExists,
    RoomFull,
    RoomNotFound,
)
from .leaderboard import LeaderboardStore
from .registry import RoomRegistry
from .room import Player, Room, RoomSettings

__all__ = [
    'AlreadyInRoom',
    'GameError',
    'InvalidInput',
    'InvalidSettings',
    'InvalidTransition',
    'LeaderboardStore',
    'NameTaken',
    'OutOfRange',
    'Player',
    'Room',
    'RoomAlreadyExists',
    'RoomFull',
    'RoomNotFound',
    'RoomRegistry',
    'RoomSettings',
    'SessionEngine',
]
