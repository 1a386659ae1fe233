class GameError(Exception):
    """A recoverable, user-facing rejection of a command.

    The room is left untouched when one of these is raised. The socket layer
    sends ``to_dict()`` back to the offending client as an ``error`` event.
    """

    code = 'GameError'
    default_message = 'Request rejected'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {'code': self.code, 'message': self.message}


class RoomNotFound(GameError):
    code = 'RoomNotFound'
    default_message = 'Room not found'


class RoomAlreadyExists(GameError):
    code = 'RoomAlreadyExists'
    default_message = 'Room already exists'


class RoomFull(GameError):
    code = 'RoomFull'
    default_message = 'Room full'


class NameTaken(GameError):
    code = 'NameTaken'
    default_message = 'Name already taken in this room'


class AlreadyInRoom(GameError):
    code = 'AlreadyInRoom'
    default_message = 'You are already in this room'


class OutOfRange(GameError):
    code = 'OutOfRange'
    default_message = 'Number is outside the room range'


class InvalidSettings(GameError):
    code = 'InvalidSettings'
    default_message = 'Settings require integer min and max with min < max'


class InvalidInput(GameError):
    code = 'InvalidInput'
    default_message = 'Invalid input'


class InvalidTransition(RuntimeError):
    """Raised when code tries to move a room backwards or skip a state."""
