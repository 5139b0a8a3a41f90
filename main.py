#main.py
import os
import sys
import time
from typing import Callable, Optional

from pypresence.exceptions import DiscordNotFound

from core.debug import debug_log
from core.discord_rpc import DiscordIpc, connect_to_discord
from core.models import NowPlaying
from core.presence import Action, PresenceState, decide

if sys.platform == "darwin":
    from core.music_macos import get_now_playing
else:
    get_now_playing = None


DEFAULT_POLL_SECONDS = 3


def poll_seconds() -> float:
    value = os.getenv("AMP_POLL_SECONDS", "")
    try:
        seconds = float(value)
    except ValueError:
        return DEFAULT_POLL_SECONDS
    return seconds if seconds > 0 else DEFAULT_POLL_SECONDS


def tick(rpc: DiscordIpc, state: PresenceState, np: Optional[NowPlaying]) -> Action:
    action = decide(state, np)

    if action is Action.ANNOUNCE:
        rpc.announce(np)
        rpc.read_response()
        state.mark_announced(np)
        print(f"[RPC] Updated: {np.title} — {np.artist} ({np.state.value})")
    elif action is Action.CLEAR:
        rpc.clear()
        rpc.read_response()
        state.mark_cleared()
        print("[RPC] Cleared (stopped / not running)")

    return action


def run(
    rpc: DiscordIpc,
    now_playing: Callable[[], Optional[NowPlaying]],
    interval: float = DEFAULT_POLL_SECONDS,
    sleep: Callable[[float], None] = time.sleep,
    state: Optional[PresenceState] = None,
) -> None:
    if state is None:
        state = PresenceState()
    while True:
        tick(rpc, state, now_playing())
        sleep(interval)


def main() -> int:
    if not get_now_playing:
        print("[Music] Unsupported OS (Apple Music is read through osascript).", file=sys.stderr)
        return 1

    try:
        rpc = connect_to_discord()
    except DiscordNotFound as e:
        print(f"[RPC] {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"[RPC] Handshake failed: {e}", file=sys.stderr)
        return 1

    print("[Music] Watching Apple Music… (Ctrl+C to stop)")

    with rpc:
        try:
            run(rpc, get_now_playing, poll_seconds())
        except KeyboardInterrupt:
            print("[Music] Stopped")
            return 0
        except OSError as e:
            debug_log(f"IPC failure: {e!r}")
            print(f"[RPC] Lost connection to Discord: {e}", file=sys.stderr)
            return 1


if __name__ == "__main__":
    sys.exit(main())
