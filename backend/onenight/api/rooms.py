from flask import Blueprint, current_app, jsonify
from onenight.models import Phase

rooms = Blueprint('rooms', __name__)


def _registry():
    return current_app.extensions['onenight']


@rooms.route('', methods=['GET'])
def list_rooms():
    """
    Lists every live room with its phase and head count.
    """
    return jsonify([
        {'roomId': s.room_id, 'phase': s.phase.value, 'playerCount': len(s.players)}
        for s in _registry().rooms()
    ])


@rooms.route('/<string:room_id>', methods=['GET'])
def get_room(room_id):
    """
    Returns the public state of a room.

    Dealt and current cards stay hidden until the results are out.
    """
    session = _registry().get(room_id)
    if session is None:
        return jsonify({'error': 'Room not found'}), 404

    payload = {
        'roomId': session.room_id,
        'phase': session.phase.value,
        'hostId': session.host.id if session.host else None,
        'players': session.roster(),
        'roleCounts': dict(session.role_counts),
    }
    if session.phase == Phase.NIGHT:
        payload['activeRole'] = session.night_schedule[session.night_index]
    if session.phase == Phase.VOTING:
        payload['votesCast'] = len(session.votes)
    if session.phase == Phase.RESULTS and session.outcome is not None:
        payload['results'] = session.outcome.to_dict(session.players)
    return jsonify(payload), 200
