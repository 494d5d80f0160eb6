"""Static role catalog: identities, wake order and team."""

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

DOPPELGANGER = 'Doppelganger'
WEREWOLF = 'Werewolf'
MINION = 'Minion'
MASON = 'Mason'
SEER = 'Seer'
ROBBER = 'Robber'
TROUBLEMAKER = 'Troublemaker'
DRUNK = 'Drunk'
INSOMNIAC = 'Insomniac'
VILLAGER = 'Villager'
HUNTER = 'Hunter'

VILLAGE = 'village'
WEREWOLVES = 'werewolf'


@dataclass(frozen=True)
class RoleInfo:
    name: str
    team: str
    # Position in the night; None for roles that sleep through it
    wake_order: Optional[int] = None

    @property
    def wakes(self) -> bool:
        return self.wake_order is not None

    def to_dict(self):
        return {
            'name': self.name,
            'team': self.team,
            'wakeOrder': self.wake_order,
            'wakes': self.wakes,
        }


ROLE_CATALOG: Dict[str, RoleInfo] = {
    info.name: info for info in (
        RoleInfo(DOPPELGANGER, VILLAGE, 0),
        RoleInfo(WEREWOLF, WEREWOLVES, 1),
        RoleInfo(MINION, WEREWOLVES, 2),
        RoleInfo(MASON, VILLAGE, 3),
        RoleInfo(SEER, VILLAGE, 4),
        RoleInfo(ROBBER, VILLAGE, 5),
        RoleInfo(TROUBLEMAKER, VILLAGE, 6),
        RoleInfo(DRUNK, VILLAGE, 7),
        RoleInfo(INSOMNIAC, VILLAGE, 8),
        RoleInfo(VILLAGER, VILLAGE),
        RoleInfo(HUNTER, VILLAGE),
    )
}


def get_role(name: str) -> Optional[RoleInfo]:
    return ROLE_CATALOG.get(name)


def is_known_role(name: str) -> bool:
    return get_role(name) is not None


def master_wake_order() -> List[str]:
    """Names of every waking role, earliest first."""
    waking = [info for info in ROLE_CATALOG.values() if info.wakes]
    return [info.name for info in sorted(waking, key=lambda i: i.wake_order)]


def catalog_in_wake_order() -> List[RoleInfo]:
    """Waking roles in night order, followed by sleepers by name."""
    waking = [ROLE_CATALOG[name] for name in master_wake_order()]
    sleeping = sorted((i for i in ROLE_CATALOG.values() if not i.wakes), key=lambda i: i.name)
    return waking + sleeping


def build_night_schedule(role_names: Iterable[str]) -> List[str]:
    """Distinct waking roles present in ``role_names``, in wake order."""
    present = set(role_names)
    return [name for name in master_wake_order() if name in present]
