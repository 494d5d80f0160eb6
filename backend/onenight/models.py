from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional


class Phase(str, Enum):
    LOBBY = 'LOBBY'
    NIGHT = 'NIGHT'
    VOTING = 'VOTING'
    RESULTS = 'RESULTS'


class Player:
    """A seated player.

    ``original_role`` is the card dealt at start and can be set only once;
    ``current_role`` is whatever card the player holds after night swaps.
    """

    def __init__(self, id: str, name: str):
        self.id = id
        self.name = name
        self._original_role: Optional[str] = None
        self.current_role: Optional[str] = None
        self.vote: Optional[str] = None

    @property
    def original_role(self) -> Optional[str]:
        return self._original_role

    def deal(self, role: str) -> None:
        if self._original_role is not None:
            raise RuntimeError(f"player {self.id} was already dealt {self._original_role}")
        self._original_role = role
        self.current_role = role

    def to_dict(self):
        return {'id': self.id, 'name': self.name}

    def to_reveal_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'originalRole': self.original_role,
            'currentRole': self.current_role,
            'vote': self.vote,
        }

    def __repr__(self):
        return f"Player(id={self.id!r}, name={self.name!r})"


# ---- Inbound messages (client -> server, already scoped to a room) ----

@dataclass(frozen=True)
class StartGame:
    sender: str
    role_counts: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class NightAction:
    sender: str
    kind: str
    target_id: Optional[str] = None
    target_id1: Optional[str] = None
    target_id2: Optional[str] = None


@dataclass(frozen=True)
class TurnDone:
    sender: str


@dataclass(frozen=True)
class RequestVoteRoster:
    sender: str


@dataclass(frozen=True)
class CastVote:
    sender: str
    target_id: Optional[str] = None
