"""Night ability resolution.

Abilities are looked up by ``(original_role, action_kind)`` in one flat
table. A handler mutates card ownership on the session and returns the text
shown privately to the actor. Anything not in the table is ignored.

Ability identity follows the dealt card: a player robbed of the Seer card
keeps seeing, whoever now holds it does not.
"""

import random
from typing import TYPE_CHECKING, Callable, Dict, Tuple

from onenight.errors import IgnoredAction
from onenight.models import NightAction, Player
from .roles import DRUNK, INSOMNIAC, MASON, MINION, ROBBER, SEER, TROUBLEMAKER, WEREWOLF

if TYPE_CHECKING:
    from .session import RoomSession

VIEW_PLAYER = 'view_player'
VIEW_CENTER = 'view_center'
SWAP_TWO = 'swap_two'
AUTO = 'auto'

# Action names sent by the first browser client
KIND_ALIASES = {
    'target_player': VIEW_PLAYER,
    'target_center': VIEW_CENTER,
    'check_wolves': AUTO,
    'check_self': AUTO,
    'check_masons': AUTO,
}

Handler = Callable[['RoomSession', Player, NightAction, random.Random], str]


def action_kind(actor: Player, action: NightAction) -> str:
    if action.kind is not None and not isinstance(action.kind, str):
        raise IgnoredAction(f"malformed kind {action.kind!r}")
    # A blind two-player swap always arrives as one message with both targets
    if actor.original_role == TROUBLEMAKER and action.target_id1 and action.target_id2:
        return SWAP_TWO
    return KIND_ALIASES.get(action.kind, action.kind)


def _other_player(session: 'RoomSession', actor: Player, target_id) -> Player:
    target = session.get_player(target_id) if target_id else None
    if target is None or target.id == actor.id:
        raise IgnoredAction(f"invalid target {target_id!r}")
    return target


def _names(players):
    return ', '.join(p.name for p in players) or 'None'


def _lone_wolf_peek(session, actor, action, rng):
    if len(session.players_with_original_role(WEREWOLF)) != 1:
        raise IgnoredAction('center peek is only for a lone wolf')
    card = rng.choice(session.center)
    return f"Lone Wolf: You saw a center card: {card}"


def _minion_check(session, actor, action, rng):
    return f"The Werewolves are: {_names(session.players_with_original_role(WEREWOLF))}"


def _seer_view_player(session, actor, action, rng):
    target = _other_player(session, actor, action.target_id)
    return f"{target.name} is the {target.current_role}"


def _seer_view_center(session, actor, action, rng):
    return f"Center Cards: {session.center[0]}, {session.center[1]}"


def _robber_swap(session, actor, action, rng):
    target = _other_player(session, actor, action.target_id)
    actor.current_role, target.current_role = target.current_role, actor.current_role
    return f"You stole {target.name}'s card. You are now the {actor.current_role}"


def _troublemaker_swap(session, actor, action, rng):
    first = _other_player(session, actor, action.target_id1)
    second = _other_player(session, actor, action.target_id2)
    if first.id == second.id:
        raise IgnoredAction('troublemaker needs two different players')
    first.current_role, second.current_role = second.current_role, first.current_role
    return f"Swapped {first.name} and {second.name}."


def _drunk_swap(session, actor, action, rng):
    index = rng.randrange(len(session.center))
    actor.current_role, session.center[index] = session.center[index], actor.current_role
    return "Swapped with Center Card. You don't know your new role."


def _insomniac_check(session, actor, action, rng):
    return f"Your role is currently: {actor.current_role}"


def _mason_check(session, actor, action, rng):
    others = [p for p in session.players_with_original_role(MASON) if p.id != actor.id]
    return f"Other Masons: {_names(others)}"


ABILITY_TABLE: Dict[Tuple[str, str], Handler] = {
    (WEREWOLF, VIEW_CENTER): _lone_wolf_peek,
    (MINION, AUTO): _minion_check,
    (SEER, VIEW_PLAYER): _seer_view_player,
    (SEER, VIEW_CENTER): _seer_view_center,
    (ROBBER, VIEW_PLAYER): _robber_swap,
    (TROUBLEMAKER, SWAP_TWO): _troublemaker_swap,
    (DRUNK, VIEW_CENTER): _drunk_swap,
    (INSOMNIAC, AUTO): _insomniac_check,
    (MASON, AUTO): _mason_check,
}


def resolve_action(session: 'RoomSession', actor: Player, action: NightAction,
                   rng: random.Random) -> str:
    """Apply ``action`` for ``actor`` and return the actor's private result.

    Raises IgnoredAction when the pair is not in the table or the payload
    does not name valid targets; nothing is mutated in that case.
    """
    kind = action_kind(actor, action)
    handler = ABILITY_TABLE.get((actor.original_role, kind))
    if handler is None:
        raise IgnoredAction(f"no ability for {actor.original_role}/{kind}")
    return handler(session, actor, action, rng)
