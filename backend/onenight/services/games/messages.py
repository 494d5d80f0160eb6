"""Outbound event names and the seams the engine talks through.

The engine never imports the Socket.IO layer. It is handed a ``Transport``
for delivery and a ``Timer`` for the one delayed call it makes.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable

ROSTER_UPDATE = 'roster_update'
ROLE_COUNTS_UPDATE = 'role_counts_update'
DEALT_ROLE = 'dealt_role'
TURN_ANNOUNCEMENT = 'turn_announcement'
YOUR_TURN = 'your_turn'
ACTION_RESULT = 'action_result'
PHASE_CHANGED = 'phase_changed'
VOTE_ROSTER = 'vote_roster'
RESULTS = 'results'
SESSION_TERMINATED = 'session_terminated'


class Transport(ABC):

    @abstractmethod
    def send(self, player_id: str, event: str, payload: Any) -> None:
        """Deliver ``payload`` to one connection."""

    @abstractmethod
    def broadcast(self, room_id: str, event: str, payload: Any) -> None:
        """Deliver ``payload`` to every connection in a room."""


class Timer(ABC):

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> None:
        """Run ``callback`` once after ``delay`` seconds. Fire and forget."""
