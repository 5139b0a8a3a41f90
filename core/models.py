# core/models.py
from dataclasses import dataclass
from enum import Enum
from typing import Tuple


class PlayerState(Enum):
    PLAYING = "playing"
    PAUSED = "paused"
    STOPPED = "stopped"


@dataclass(frozen=True)
class NowPlaying:
    title: str
    artist: str
    album: str
    state: PlayerState
    position: float  # seconds
    duration: float  # seconds

    @property
    def key(self) -> Tuple[str, str, str]:
        # Identity only; position/duration are not part of it
        return (self.title, self.artist, self.album)

    @property
    def playing(self) -> bool:
        return self.state is PlayerState.PLAYING

    @property
    def subtitle(self) -> str:
        return f"{self.artist} • {self.album}" if self.album else self.artist
