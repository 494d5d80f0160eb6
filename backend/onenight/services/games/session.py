"""RoomSession: state and phase machine for one game.

Phases only move forward: LOBBY -> NIGHT -> VOTING -> RESULTS. Each inbound
message is handled to completion, broadcasts included, before the caller
moves on; the session itself holds no locks.
"""

import logging
import random
from collections import Counter
from typing import Dict, List, Optional, Set

from onenight.errors import IgnoredAction, NameConflictError, RoomClosedError, ValidationError
from onenight.models import (
    CastVote,
    NightAction,
    Phase,
    Player,
    RequestVoteRoster,
    StartGame,
    TurnDone,
)
from . import messages
from .deck import build_deck, deal
from .resolver import resolve_action
from .roles import build_night_schedule
from .scheduler import NightScheduler, ReleaseReason
from .scoring import tally, votes_complete

logger = logging.getLogger(__name__)

_PHASE_ORDER = [Phase.LOBBY, Phase.NIGHT, Phase.VOTING, Phase.RESULTS]


class RoomSession:

    def __init__(self, room_id: str, transport: messages.Transport,
                 scheduler: NightScheduler, rng: Optional[random.Random] = None):
        self.room_id = room_id
        self.transport = transport
        self.scheduler = scheduler
        self.rng = rng or random.Random()

        self.players: List[Player] = []
        self.center: List[str] = []
        self.phase = Phase.LOBBY
        self.role_counts: Dict[str, int] = {}
        self.night_schedule: List[str] = []
        self.night_index = 0
        self.pending_actors: Set[str] = set()
        # Players who already used their ability during the current turn
        self.acted: Set[str] = set()
        self.votes: Dict[str, str] = {}
        self.outcome = None
        self.closed = False

        self._handlers = {
            StartGame: self._on_start,
            NightAction: self._on_night_action,
            TurnDone: self._on_turn_done,
            RequestVoteRoster: self._on_request_vote_roster,
            CastVote: self._on_cast_vote,
        }

    # ---- roster ----

    @property
    def host(self) -> Optional[Player]:
        return self.players[0] if self.players else None

    def get_player(self, player_id: str) -> Optional[Player]:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def is_seated(self, player_id: str) -> bool:
        return self.get_player(player_id) is not None

    def players_with_original_role(self, role: str) -> List[Player]:
        return [p for p in self.players if p.original_role == role]

    def roster(self):
        return [p.to_dict() for p in self.players]

    def add_player(self, player_id: str, name: str) -> Player:
        if self.phase != Phase.LOBBY:
            raise RoomClosedError(self.room_id)
        if any(p.name == name for p in self.players):
            raise NameConflictError(name)
        player = Player(player_id, name)
        self.players.append(player)
        logger.info(f"[join] room={self.room_id} player={player_id} name={name} seated={len(self.players)}")
        return player

    def remove_player(self, player_id: str) -> Optional[Player]:
        player = self.get_player(player_id)
        if player is not None:
            self.players.remove(player)
        return player

    # ---- delivery ----

    def broadcast(self, event: str, payload=None) -> None:
        self.transport.broadcast(self.room_id, event, payload)

    def send(self, player_id: str, event: str, payload=None) -> None:
        self.transport.send(player_id, event, payload)

    def broadcast_roster(self) -> None:
        self.broadcast(messages.ROSTER_UPDATE, self.roster())

    # ---- phase machine ----

    def _transition(self, target: Phase) -> None:
        current = _PHASE_ORDER.index(self.phase)
        if _PHASE_ORDER.index(target) != current + 1:
            raise RuntimeError(f"illegal phase change {self.phase.value} -> {target.value}")
        logger.info(f"[phase] room={self.room_id} {self.phase.value} -> {target.value}")
        self.phase = target

    def handle(self, message) -> None:
        """Entry point for every routed client message."""
        handler = self._handlers.get(type(message))
        if handler is None:
            logger.debug(f"[action-ignored] room={self.room_id} unknown message {message!r}")
            return
        try:
            handler(message)
        except IgnoredAction as exc:
            logger.debug(f"[action-ignored] room={self.room_id} sender={message.sender} reason={exc}")
        except ValidationError as exc:
            logger.info(f"[start-rejected] room={self.room_id} reason={exc}")
            self.broadcast(messages.ACTION_RESULT, str(exc))

    def start(self, role_counts: Dict[str, int]) -> None:
        """Deal a new game and hand control to the night scheduler.

        Raises ValidationError, leaving the room untouched in LOBBY, when the
        counts do not add up to one card per player plus the center.
        """
        if self.phase != Phase.LOBBY:
            raise IgnoredAction(f"start during {self.phase.value}")
        deck = build_deck(role_counts, len(self.players), self.rng)

        self.role_counts = {name: n for name, n in role_counts.items() if n > 0}
        self.broadcast(messages.ROLE_COUNTS_UPDATE, dict(self.role_counts))

        _, self.center = deal(deck, self.players)
        self.night_schedule = build_night_schedule(deck)
        self.night_index = 0
        self._transition(Phase.NIGHT)
        logger.info(
            f"[game-start] room={self.room_id} players={len(self.players)} "
            f"schedule={','.join(self.night_schedule) or '-'}"
        )
        logger.debug(f"[game-deal] room={self.room_id} deck={deck}")

        for p in self.players:
            self.send(p.id, messages.DEALT_ROLE, {'role': p.original_role})
        self.scheduler.advance(self)

    def enter_voting(self) -> None:
        self.pending_actors.clear()
        self.acted.clear()
        self._transition(Phase.VOTING)
        self.broadcast(messages.PHASE_CHANGED, self.phase.value)

    def finish(self) -> None:
        self.outcome = tally(self)
        self._transition(Phase.RESULTS)
        logger.info(f"[results] room={self.room_id} winner={self.outcome.winner!r} dead={self.outcome.dead}")
        self.broadcast(messages.RESULTS, self.outcome.to_dict(self.players))

    def player_departed(self, player_id: str) -> None:
        """Drop a non-host player and release whatever the game waited on them for."""
        player = self.remove_player(player_id)
        if player is None:
            return
        logger.info(f"[leave] room={self.room_id} player={player_id} phase={self.phase.value}")
        if self.phase == Phase.LOBBY:
            self.broadcast_roster()
        elif self.phase == Phase.NIGHT:
            self.scheduler.release_pending_actor(self, player_id, ReleaseReason.DISCONNECTED)
        elif self.phase == Phase.VOTING:
            self.votes.pop(player_id, None)
            if votes_complete(self):
                self.finish()

    def tokens_in_play(self) -> Counter:
        """Multiset of every card held by a seated player or lying in the center."""
        return Counter([p.current_role for p in self.players] + list(self.center))

    # ---- message handlers ----

    def _on_start(self, msg: StartGame) -> None:
        host = self.host
        if host is None or msg.sender != host.id:
            raise IgnoredAction('only the host may start')
        self.start(msg.role_counts)

    def _on_night_action(self, msg: NightAction) -> None:
        if self.phase != Phase.NIGHT:
            raise IgnoredAction('not night')
        actor = self.get_player(msg.sender)
        if actor is None or actor.id not in self.pending_actors:
            raise IgnoredAction('not this player\'s turn')
        if actor.original_role != self.night_schedule[self.night_index]:
            raise IgnoredAction('role is not on turn')
        if actor.id in self.acted:
            raise IgnoredAction('ability already used this turn')

        result = resolve_action(self, actor, msg, self.rng)
        self.acted.add(actor.id)
        self.send(actor.id, messages.ACTION_RESULT, result)

    def _on_turn_done(self, msg: TurnDone) -> None:
        if not self.scheduler.release_pending_actor(self, msg.sender, ReleaseReason.EXPLICIT_DONE):
            raise IgnoredAction('nothing pending for sender')

    def _on_request_vote_roster(self, msg: RequestVoteRoster) -> None:
        if not self.is_seated(msg.sender):
            raise IgnoredAction('not seated')
        self.send(msg.sender, messages.VOTE_ROSTER, self.roster())

    def _on_cast_vote(self, msg: CastVote) -> None:
        if self.phase != Phase.VOTING:
            raise IgnoredAction('not voting')
        voter = self.get_player(msg.sender)
        if voter is None or voter.id in self.votes:
            raise IgnoredAction('voter not seated or already voted')
        if not self.is_seated(msg.target_id):
            raise IgnoredAction('vote target not seated')

        self.votes[voter.id] = msg.target_id
        voter.vote = msg.target_id
        logger.info(f"[vote] room={self.room_id} votes={len(self.votes)}/{len(self.players)}")
        if votes_complete(self):
            self.finish()
