"""Night scheduler: walks a session through its wake turns.

- A turn wakes every seated player whose *original* role is on turn
- The turn ends once each of them said done (or left the room)
- A turn nobody holds still waits a random few seconds so that outside
  observers cannot tell it apart from a real one
- After the last turn the session moves to VOTING
"""

import logging
import random
from enum import Enum
from typing import TYPE_CHECKING, Optional, Tuple

from onenight.models import Phase
from . import messages
from .deck import CENTER_CARD_COUNT
from .roles import WEREWOLF

if TYPE_CHECKING:
    from .session import RoomSession

logger = logging.getLogger(__name__)


class ReleaseReason(str, Enum):
    EXPLICIT_DONE = 'explicit-done'
    DISCONNECTED = 'disconnected'


class NightScheduler:

    def __init__(self, timer: messages.Timer, rng: Optional[random.Random] = None,
                 idle_delay: Tuple[float, float] = (3.0, 7.0)):
        self.timer = timer
        self.rng = rng or random.Random()
        self.idle_delay = idle_delay

    def advance(self, session: 'RoomSession') -> None:
        """Open the turn at ``session.night_index``, or end the night."""
        if session.night_index >= len(session.night_schedule):
            session.enter_voting()
            return

        role = session.night_schedule[session.night_index]
        session.acted.clear()
        session.broadcast(messages.TURN_ANNOUNCEMENT, {'activeRole': role})

        active = session.players_with_original_role(role)
        if not active:
            delay = self.rng.uniform(*self.idle_delay)
            expected_index = session.night_index
            logger.info(f"[turn-idle] room={session.room_id} role={role} delay={delay:.1f}s")
            self.timer.call_later(delay, lambda: self._idle_turn_elapsed(session, expected_index))
            return

        session.pending_actors = {p.id for p in active}
        logger.info(f"[turn-open] room={session.room_id} role={role} waiting={len(active)}")
        lone_wolf = role == WEREWOLF and len(active) == 1
        for player in active:
            session.send(player.id, messages.YOUR_TURN, self.turn_prompt(session, player, role, lone_wolf))

    def turn_prompt(self, session: 'RoomSession', player, role: str, lone_wolf: bool):
        prompt = {
            'role': role,
            'centerCount': CENTER_CARD_COUNT,
            'otherPlayers': [p.to_dict() for p in session.players if p.id != player.id],
        }
        if role == WEREWOLF:
            prompt['loneWolf'] = lone_wolf
            prompt['werewolves'] = [
                p.name for p in session.players_with_original_role(WEREWOLF) if p.id != player.id
            ]
        return prompt

    def release_pending_actor(self, session: 'RoomSession', player_id: str,
                              reason: ReleaseReason) -> bool:
        """Mark ``player_id`` as finished with the current turn.

        Explicit "done" messages and disconnects both come through here.
        Returns False when the player was not being waited on.
        """
        if session.phase != Phase.NIGHT or player_id not in session.pending_actors:
            return False
        session.pending_actors.discard(player_id)
        logger.info(
            f"[turn-release] room={session.room_id} player={player_id} "
            f"reason={reason.value} remaining={len(session.pending_actors)}"
        )
        if not session.pending_actors:
            self.complete_turn(session)
        return True

    def complete_turn(self, session: 'RoomSession') -> None:
        session.night_index += 1
        self.advance(session)

    def _idle_turn_elapsed(self, session: 'RoomSession', expected_index: int) -> None:
        if session.closed:
            logger.info(f"[timer-abort] room={session.room_id} reason=room-closed")
            return
        if session.phase != Phase.NIGHT or session.night_index != expected_index:
            logger.info(f"[timer-abort] room={session.room_id} reason=turn-mismatch")
            return
        self.complete_turn(session)
