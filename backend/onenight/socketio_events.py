from flask_socketio import join_room, leave_room, emit
from flask import current_app, request
from onenight import socketio
from onenight.errors import NameConflictError, RoomClosedError
from onenight.models import CastVote, NightAction, RequestVoteRoster, StartGame, TurnDone
from onenight.services.games.deck import counts_from_list
from onenight.services.games.messages import Timer, Transport
from typing import Dict
import threading


def room_channel(room_id: str) -> str:
    return f"room:{room_id}"


class SocketIOTransport(Transport):
    """Delivers engine events; player ids are Socket.IO session ids."""

    def __init__(self, sio, namespace: str = '/ws'):
        self.socketio = sio
        self.namespace = namespace

    def send(self, player_id, event, payload):
        self.socketio.emit(event, payload, to=player_id, namespace=self.namespace)

    def broadcast(self, room_id, event, payload):
        self.socketio.emit(event, payload, to=room_channel(room_id), namespace=self.namespace)


class SocketIOTimer(Timer):
    """Runs delayed callbacks as background tasks.

    With ``inline`` set (tests) the callback runs immediately, like the stage
    timers did under TESTING.
    """

    def __init__(self, sio, inline: bool = False):
        self.socketio = sio
        self.inline = inline

    def call_later(self, delay, callback):
        if self.inline:
            callback()
            return

        def _runner():
            self.socketio.sleep(delay)
            with _dispatch_lock:
                callback()

        self.socketio.start_background_task(_runner)


# One message at a time across all rooms, whatever async mode Socket.IO runs in
_dispatch_lock = threading.RLock()
_sid_to_room: Dict[str, str] = {}


def _payload(data) -> dict:
    """Client payloads that are not JSON objects are treated as empty."""
    return data if isinstance(data, dict) else {}


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _registry():
    return current_app.extensions['onenight']


def _route(message) -> None:
    room_id = _sid_to_room.get(message.sender)
    if not room_id:
        return
    with _dispatch_lock:
        _registry().route(room_id, message)


def _depart(sid: str) -> None:
    room_id = _sid_to_room.pop(sid, None)
    if not room_id:
        return
    registry = _registry()
    with _dispatch_lock:
        session = registry.get(room_id)
        members = [p.id for p in session.players] if session else []
        registry.departed(room_id, sid)
        if registry.get(room_id) is None:
            # Host left: everyone else loses their seat along with the room
            for member in members:
                _sid_to_room.pop(member, None)
            socketio.close_room(room_channel(room_id), namespace=current_app.config.get('SOCKETIO_NAMESPACE', '/ws'))
    current_app.logger.info(f"[socket-leave] sid={sid} room={room_id}")


def handle_connect(auth=None):
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(reason=None):
    _depart(_get_sid())


def handle_join_game(data):
    data = _payload(data)
    name = data.get('name')
    room_id = data.get('roomId')
    if not name or not room_id:
        emit('error', {'message': 'name and roomId are required'})
        return {'error': 'name and roomId are required'}
    sid = _get_sid()
    if sid in _sid_to_room:
        return {'error': 'Already in a room'}

    room_id = str(room_id)
    # Join the channel first so the joiner receives its own roster update
    join_room(room_channel(room_id))
    with _dispatch_lock:
        try:
            _registry().join(room_id, sid, str(name))
        except NameConflictError:
            leave_room(room_channel(room_id))
            return {'error': 'Name already taken'}
        except RoomClosedError:
            leave_room(room_channel(room_id))
            return {'error': 'Game already in progress'}
        _sid_to_room[sid] = room_id
    return {'success': True, 'playerId': sid}


def handle_leave_game(data=None):
    sid = _get_sid()
    room_id = _sid_to_room.get(sid)
    if not room_id:
        return
    _depart(sid)
    leave_room(room_channel(room_id))
    emit('left', {'roomId': room_id})


def handle_start_game(data):
    data = _payload(data)
    role_counts = data.get('roleCounts')
    role_list = data.get('customRoleList')
    if role_counts is None and isinstance(role_list, list):
        role_counts = counts_from_list(str(name) for name in role_list)
    _route(StartGame(_get_sid(), role_counts if role_counts is not None else {}))


def handle_night_action(data):
    data = _payload(data)
    _route(NightAction(
        _get_sid(),
        kind=data.get('kind') or data.get('action'),
        target_id=data.get('targetId'),
        target_id1=data.get('targetId1'),
        target_id2=data.get('targetId2'),
    ))


def handle_turn_done(data=None):
    _route(TurnDone(_get_sid()))


def handle_request_vote_roster(data=None):
    _route(RequestVoteRoster(_get_sid()))


def handle_cast_vote(data):
    _route(CastVote(_get_sid(), target_id=_payload(data).get('targetId')))


def register_socketio_handlers(namespace: str = '/ws') -> None:
    """Register Socket.IO event handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('join_game', handle_join_game, namespace=namespace)
    socketio.on_event('leave_game', handle_leave_game, namespace=namespace)
    socketio.on_event('start_game', handle_start_game, namespace=namespace)
    socketio.on_event('night_action', handle_night_action, namespace=namespace)
    socketio.on_event('turn_done', handle_turn_done, namespace=namespace)
    socketio.on_event('request_vote_roster', handle_request_vote_roster, namespace=namespace)
    socketio.on_event('cast_vote', handle_cast_vote, namespace=namespace)
