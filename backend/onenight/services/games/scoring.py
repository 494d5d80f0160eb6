from collections import Counter
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Tuple

from .roles import HUNTER, WEREWOLF

if TYPE_CHECKING:
    from .session import RoomSession

VILLAGE_WINS_WOLF_DIED = 'Village wins (werewolf died)'
WEREWOLVES_WIN = 'Werewolves win'
VILLAGE_WINS_NO_DEATHS = 'Village wins (no werewolves, nobody died)'
VILLAGE_LOSES = 'Village loses (no werewolves, a player died)'


@dataclass
class VoteOutcome:
    winner: str
    village_won: bool
    dead: List[str] = field(default_factory=list)
    vote_counts: Dict[str, int] = field(default_factory=dict)

    def to_dict(self, players):
        return {
            'winner': self.winner,
            'villageWon': self.village_won,
            'dead': list(self.dead),
            'voteCounts': dict(self.vote_counts),
            'players': [p.to_reveal_dict() for p in players],
        }


def votes_complete(session: 'RoomSession') -> bool:
    """True once every seated player has exactly one recorded vote."""
    return bool(session.players) and len(session.votes) == len(session.players)


def count_votes(votes: Dict[str, str]) -> Dict[str, int]:
    return dict(Counter(votes.values()))


def find_deaths(vote_counts: Dict[str, int]) -> List[str]:
    """Everyone sharing the top count dies; ties are not broken."""
    top = max(vote_counts.values(), default=0)
    if top == 0:
        return []
    return [target for target, n in vote_counts.items() if n == top]


def decide_winner(players, dead_ids) -> Tuple[str, bool]:
    wolves = [p for p in players if p.current_role == WEREWOLF]
    dead = [p for p in players if p.id in dead_ids]
    if wolves:
        if any(p.current_role == WEREWOLF for p in dead):
            return VILLAGE_WINS_WOLF_DIED, True
        return WEREWOLVES_WIN, False
    if not dead:
        return VILLAGE_WINS_NO_DEATHS, True
    return VILLAGE_LOSES, False


def tally(session: 'RoomSession') -> VoteOutcome:
    """
    Compute deaths and the winner from the recorded votes.

    Ballots naming a player who has since left are not counted. A Hunter
    who dies takes the player they voted for with them (one pass, no chains).
    """
    seated = {p.id: p for p in session.players}
    ballots = {voter: target for voter, target in session.votes.items() if target in seated}
    counts = count_votes(ballots)
    dead = find_deaths(counts)

    for victim_id in list(dead):
        if seated[victim_id].current_role == HUNTER:
            shot = ballots.get(victim_id)
            if shot is not None and shot not in dead:
                dead.append(shot)

    # Report deaths in seating order
    dead = [p.id for p in session.players if p.id in dead]
    winner, village_won = decide_winner(session.players, set(dead))
    return VoteOutcome(winner=winner, village_won=village_won, dead=dead, vote_counts=counts)
