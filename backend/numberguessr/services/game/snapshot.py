from typing import Optional

from .room import Room


def room_snapshot(room: Room, viewer_id: Optional[str] = None) -> dict:
    """Project a room for one viewer.

    Only the viewer's own secret number (and own lie flags on guesses) are
    included; everybody else sees ``hasSecretNumber``. Pass ``viewer_id=None``
    for a spectator view with no secrets at all.
    """
    players = []
    for p in room.players:
        own = viewer_id is not None and p.connection_id == viewer_id
        pd = {
            'connectionId': p.connection_id,
            'displayName': p.display_name,
            'hasSecretNumber': p.has_secret_number,
            'hasUsedLie': p.has_used_lie,
            'guesses': [g.to_dict(include_lie=own) for g in p.guesses],
        }
        if own:
            pd['secretNumber'] = p.secret_number
        players.append(pd)

    snapshot = {
        'code': room.code,
        'isPublic': room.is_public,
        'hostDisplayName': room.host_display_name,
        'settings': room.settings.to_dict(),
        'players': players,
        'status': room.status,
    }
    if room.turn_connection_id is not None:
        snapshot['turnConnectionId'] = room.turn_connection_id
    if room.winner_display_name is not None:
        snapshot['winnerDisplayName'] = room.winner_display_name
    return snapshot
