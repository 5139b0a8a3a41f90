# core/presence.py
"""
Decides, tick by tick, whether Discord needs a fresh activity, a clear, or
nothing at all.

The state only moves through mark_announced()/mark_cleared(), which the
driver calls once the matching IPC command has been written and answered.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from .models import NowPlaying, PlayerState


class Action(Enum):
    NOTHING = "nothing"
    ANNOUNCE = "announce"
    CLEAR = "clear"


@dataclass
class PresenceState:
    last_key: Optional[Tuple[str, str, str]] = field(default=None, init=False)
    last_state: Optional[PlayerState] = field(default=None, init=False)
    cleared: bool = field(default=True, init=False)

    def mark_announced(self, np: NowPlaying) -> None:
        self.last_key = np.key
        self.last_state = np.state
        self.cleared = False

    def mark_cleared(self) -> None:
        self.last_key = None
        self.last_state = None
        self.cleared = True


def decide(state: PresenceState, np: Optional[NowPlaying]) -> Action:
    if np is None:
        return Action.NOTHING if state.cleared else Action.CLEAR

    if state.cleared:
        return Action.ANNOUNCE

    if np.key == state.last_key and np.state is state.last_state:
        return Action.NOTHING

    return Action.ANNOUNCE
