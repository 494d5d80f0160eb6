"""Errors raised by the game-session engine.

Socket handlers translate these into acks or broadcasts; nothing here knows
about the transport.
"""


class OneNightError(Exception):
    """Base class for every engine error."""
    pass


class ValidationError(OneNightError):
    """A start request whose role list cannot be dealt."""

    def __init__(self, message, expected=None):
        self.expected = expected
        super().__init__(message)


class NameConflictError(OneNightError):
    def __init__(self, name):
        self.name = name
        super().__init__(f"Name {name!r} already taken")


class RoomClosedError(OneNightError):
    """Join attempted after the room left the lobby."""

    def __init__(self, room_id):
        self.room_id = room_id
        super().__init__(f"Room {room_id} is not accepting players")


class IgnoredAction(OneNightError):
    """A message that does not fit the phase, the sender's role or the turn.

    Raised inside the engine and swallowed at the session boundary: late or
    forged client messages are dropped without a reply.
    """
    pass
