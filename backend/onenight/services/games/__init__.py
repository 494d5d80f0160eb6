"""Game-session engine: deck, night scheduler, abilities and vote tally.

Pure in-memory domain logic. Socket handlers and HTTP routes import from
here; nothing in this package imports Flask or Socket.IO.
"""

from .registry import RoomRegistry
from .session import RoomSession

__all__ = ['RoomRegistry', 'RoomSession']
