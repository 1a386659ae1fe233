from flask import current_app, request
from flask_socketio import emit
from sqlalchemy.exc import SQLAlchemyError
from typing import Dict
import functools

from numberguessr import get_engine, socketio
from numberguessr.services.game import GameError, InvalidInput, InvalidSettings, RoomSettings

# sid -> stable identity (client token) for leaderboard accumulation
_sid_to_identity: Dict[str, str] = {}

MAX_IDENTITY_LENGTH = 128


class SocketIONotifier:
    """Delivers engine notifications over Socket.IO."""

    def __init__(self, server, namespace='/'):
        self.server = server
        self.namespace = namespace

    def send(self, connection_id, event, payload):
        self.server.emit(event, payload, to=connection_id, namespace=self.namespace)

    def broadcast(self, event, payload):
        self.server.emit(event, payload, namespace=self.namespace)


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _identity() -> str:
    sid = _get_sid()
    return _sid_to_identity.get(sid, sid)


def _parse_int(value, field: str) -> int:
    if isinstance(value, bool):
        raise InvalidInput(f'{field} must be an integer')
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            pass
    raise InvalidInput(f'{field} must be an integer')


def _parse_settings(raw):
    if raw is None:
        return None
    if not isinstance(raw, dict):
        raise InvalidSettings()
    try:
        return RoomSettings(min=_parse_int(raw.get('min'), 'min'), max=_parse_int(raw.get('max'), 'max'))
    except InvalidInput:
        raise InvalidSettings()


def _room_code(data):
    return data.get('roomId') or data.get('roomCode') or data.get('code')


def _display_name(data):
    return data.get('displayName') or data.get('username')


def game_command(handler):
    """Validate the payload shape and turn GameErrors into an ``error`` event."""
    @functools.wraps(handler)
    def wrapper(data=None):
        try:
            if data is None:
                data = {}
            if not isinstance(data, dict):
                raise InvalidInput('Payload must be an object')
            return handler(data)
        except GameError as exc:
            current_app.logger.info(f"[rejected] sid={_get_sid()} event={handler.__name__} code={exc.code}")
            emit('error', exc.to_dict())
    return wrapper


def handle_connect(auth=None):
    sid = _get_sid()
    token = auth.get('token') if isinstance(auth, dict) else None
    identity = str(token)[:MAX_IDENTITY_LENGTH] if token else sid
    _sid_to_identity[sid] = identity
    emit('connected', {'connectionId': sid, 'identity': identity})


def handle_disconnect(reason=None):
    sid = _get_sid()
    _sid_to_identity.pop(sid, None)
    removed = get_engine().disconnect(sid)
    if removed:
        current_app.logger.info(f"[disconnect] sid={sid} rooms={','.join(removed)} reason={reason}")


@game_command
def handle_create_room(data):
    code = _room_code(data)
    get_engine().create_room(
        _get_sid(),
        _identity(),
        _display_name(data),
        settings=_parse_settings(data.get('settings')),
        is_public=bool(data.get('isPublic')),
        code=str(code) if code else None,
    )


@game_command
def handle_join_room(data):
    code = _room_code(data)
    if not code:
        raise InvalidInput('roomId is required')
    get_engine().join_room(_get_sid(), _identity(), _display_name(data), str(code))


@game_command
def handle_set_secret_number(data):
    number = _parse_int(data.get('number'), 'number')
    get_engine().pick_number(_get_sid(), str(_room_code(data) or ''), number)


@game_command
def handle_make_guess(data):
    raw = data.get('guess') if 'guess' in data else data.get('value')
    value = _parse_int(raw, 'guess')
    get_engine().guess(_get_sid(), str(_room_code(data) or ''), value, lie=bool(data.get('lie', False)))


def handle_list_lobbies(*_args):
    return get_engine().list_public_lobbies()


def handle_leaderboard(*_args):
    try:
        return {'leaderboard': get_engine().get_leaderboard()}
    except SQLAlchemyError as exc:
        current_app.logger.error(f"[leaderboard-error] read failed: {exc}")
        return {'leaderboard': []}


def handle_ping(data=None):
    emit('pong', data or {})


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on the given namespace."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('create-room', handle_create_room, namespace=namespace)
    socketio.on_event('join-room', handle_join_room, namespace=namespace)
    socketio.on_event('set-secret-number', handle_set_secret_number, namespace=namespace)
    socketio.on_event('make-guess', handle_make_guess, namespace=namespace)
    socketio.on_event('lobby:list', handle_list_lobbies, namespace=namespace)
    socketio.on_event('game:leaderboard', handle_leaderboard, namespace=namespace)
    socketio.on_event('ping', handle_ping, namespace=namespace)
