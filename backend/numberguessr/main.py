from flask import Blueprint, jsonify

from numberguessr import get_engine

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the NumberGuessr game server!'})


@main.route('/health')
def health_check():
    return 'OK', 200


@main.route('/api/lobbies', methods=['GET'])
def list_lobbies():
    """Public rooms that are still waiting for an opponent."""
    return jsonify(get_engine().list_public_lobbies()), 200


@main.route('/api/leaderboard', methods=['GET'])
def get_leaderboard():
    return jsonify({'leaderboard': get_engine().get_leaderboard()}), 200


@main.route('/api/rooms/<string:code>', methods=['GET'])
def get_room(code):
    """Spectator view of a room. Secret numbers are never included."""
    view = get_engine().room_view(code)
    if view is None:
        return jsonify({'error': 'Room not found', 'code': 'RoomNotFound'}), 404
    return jsonify(view), 200
