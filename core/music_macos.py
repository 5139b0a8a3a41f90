#core/music_macos.py
import math
import subprocess
from typing import Optional

from .debug import debug_log
from .models import NowPlaying, PlayerState

FIELD_SEPARATOR = "||"

SCRIPT = r'''
tell application "Music"
    if not (it is running) then
        return "STOPPED"
    end if

    set ps to player state as text
    if ps is not "playing" and ps is not "paused" then
        return "STOPPED"
    end if

    set t to current track
    return (name of t) & "||" & (artist of t) & "||" & (album of t) & "||" & ps & "||" & (player position) & "||" & (duration of t)
end tell
'''


def read_now_playing_raw() -> Optional[str]:
    try:
        out = subprocess.check_output(
            ["osascript", "-e", SCRIPT],
            text=True,
            errors="replace",
        ).strip()
    except (OSError, subprocess.CalledProcessError) as e:
        debug_log(f"osascript failed: {e}", "Music")
        return None

    if not out or out == "STOPPED":
        return None
    return out


def parse_state(token: str) -> PlayerState:
    if token == "playing":
        return PlayerState.PLAYING
    if token == "paused":
        return PlayerState.PAUSED
    return PlayerState.STOPPED


def parse_seconds(value: str) -> Optional[float]:
    # Some locales print "12,5" for the player position
    try:
        seconds = float(value.replace(",", "."))
    except ValueError:
        return None
    if not math.isfinite(seconds) or seconds < 0:
        return None
    return seconds


def parse_now_playing(raw: str) -> Optional[NowPlaying]:
    parts = [p.strip() for p in raw.split(FIELD_SEPARATOR)]
    if len(parts) < 6:
        debug_log(f"Short now-playing line: {raw!r}", "Music")
        return None

    position = parse_seconds(parts[4])
    duration = parse_seconds(parts[5])
    if position is None or duration is None:
        debug_log(f"Bad position/duration in: {raw!r}", "Music")
        return None

    return NowPlaying(
        title=parts[0],
        artist=parts[1],
        album=parts[2],
        state=parse_state(parts[3]),
        position=position,
        duration=duration,
    )


def get_now_playing() -> Optional[NowPlaying]:
    raw = read_now_playing_raw()
    if raw is None:
        return None
    return parse_now_playing(raw)
