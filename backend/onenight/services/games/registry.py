"""RoomRegistry: finds, creates and tears down room sessions.

The backing store is any mutable mapping of room id to RoomSession; tests
pass their own dict so registries never share state.
"""

import logging
import random
from typing import List, MutableMapping, Optional, Tuple

from onenight.models import Player
from . import messages
from .scheduler import NightScheduler
from .session import RoomSession

logger = logging.getLogger(__name__)

HOST_DISCONNECTED = 'Host disconnected.'


class RoomRegistry:

    def __init__(self, transport: messages.Transport, timer: messages.Timer,
                 store: Optional[MutableMapping[str, RoomSession]] = None,
                 rng: Optional[random.Random] = None,
                 idle_delay: Tuple[float, float] = (3.0, 7.0)):
        self.transport = transport
        self.rng = rng or random.Random()
        self.scheduler = NightScheduler(timer, rng=self.rng, idle_delay=idle_delay)
        self._rooms: MutableMapping[str, RoomSession] = store if store is not None else {}

    def get(self, room_id: str) -> Optional[RoomSession]:
        return self._rooms.get(room_id)

    def rooms(self) -> List[RoomSession]:
        return list(self._rooms.values())

    def join(self, room_id: str, player_id: str, name: str) -> Player:
        """Seat ``player_id`` under ``name``, creating the room if needed.

        Raises NameConflictError or RoomClosedError without touching the room.
        The roster broadcast only happens on success.
        """
        session = self._rooms.get(room_id)
        if session is None:
            session = RoomSession(room_id, self.transport, self.scheduler, rng=self.rng)
            self._rooms[room_id] = session
            logger.info(f"[room-create] room={room_id}")
        player = session.add_player(player_id, name)
        session.broadcast_roster()
        return player

    def route(self, room_id: str, message) -> None:
        session = self._rooms.get(room_id)
        if session is None:
            return
        session.handle(message)

    def departed(self, room_id: str, player_id: str) -> None:
        session = self._rooms.get(room_id)
        if session is None or not session.is_seated(player_id):
            return
        if session.host.id == player_id:
            logger.info(f"[room-end] room={room_id} reason=host-left phase={session.phase.value}")
            session.broadcast(messages.SESSION_TERMINATED, HOST_DISCONNECTED)
            self.remove(room_id)
        else:
            session.player_departed(player_id)

    def remove(self, room_id: str) -> None:
        session = self._rooms.pop(room_id, None)
        if session is not None:
            # Pending idle-turn timers check this flag before touching the room
            session.closed = True
            session.pending_actors.clear()
