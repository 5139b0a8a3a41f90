#core/discord_rpc.py
import json
import math
import os
import socket
import time
from pathlib import Path
from typing import List, Optional, Tuple

from pypresence.exceptions import DiscordNotFound
from pypresence.types import ActivityType

from .debug import debug_log
from .framing import OP_FRAME, OP_HANDSHAKE, read_frame, write_frame
from .models import NowPlaying


# APP ID
APP_CLIENT_ID = os.getenv("AMP_CLIENT_ID") or "1470151628547031280"

ACTIVITY_NAME = "Apple Music"
LARGE_IMAGE = "am_icon_001"
SOCKET_PREFIX = "discord-ipc"
SOCKET_SLOTS = 10


def unix_now() -> int:
    return int(time.time())


def candidate_dirs() -> List[Path]:
    dirs = []
    for var in ("DISCORD_IPC_PATH", "TMPDIR"):
        value = os.getenv(var)
        if value:
            dirs.append(Path(value))
    dirs.append(Path("/tmp"))
    return dirs


def discover_socket() -> socket.socket:
    for directory in candidate_dirs():
        for i in range(SOCKET_SLOTS):
            path = directory / f"{SOCKET_PREFIX}-{i}"
            if not path.exists():
                continue

            sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
            try:
                sock.connect(str(path))
            except OSError as e:
                sock.close()
                debug_log(f"IPC candidate {path} refused: {e}")
                continue

            print(f"[RPC] Connected to Discord IPC at: {path}")
            return sock

    raise DiscordNotFound()


def _dumps(payload: dict) -> bytes:
    return json.dumps(payload, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def build_activity(np: NowPlaying, now: Optional[int] = None) -> dict:
    activity = {
        "name": ACTIVITY_NAME,
        "type": ActivityType.LISTENING.value,
        "details": np.title,
        "state": np.subtitle,
    }

    # Progress bar only while playing
    if np.playing:
        if now is None:
            now = unix_now()
        start = now - math.floor(np.position)
        activity["timestamps"] = {"start": start, "end": start + math.floor(np.duration)}

    activity["assets"] = {"large_image": LARGE_IMAGE}
    return activity


def build_command(activity: Optional[dict] = None) -> dict:
    args = {"pid": os.getpid()}
    if activity is not None:
        args["activity"] = activity

    return {
        "cmd": "SET_ACTIVITY",
        "nonce": str(unix_now()),
        "args": args,
    }


class DiscordIpc:
    """
    One connected Discord IPC socket. Every send is followed by exactly one
    response frame, which the caller reads with read_response().
    """

    def __init__(self, sock: socket.socket, client_id: str = APP_CLIENT_ID):
        self.sock = sock
        self.client_id = client_id

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def handshake(self) -> None:
        write_frame(self.sock, OP_HANDSHAKE, _dumps({"v": 1, "client_id": self.client_id}))

    def announce(self, np: NowPlaying) -> None:
        write_frame(self.sock, OP_FRAME, _dumps(build_command(build_activity(np))))

    def clear(self) -> None:
        write_frame(self.sock, OP_FRAME, _dumps(build_command()))

    def read_response(self) -> Tuple[int, str]:
        op, payload = read_frame(self.sock)
        try:
            data = json.loads(payload)
        except ValueError:
            debug_log(f"Unparseable IPC response (op={op}): {payload!r}")
            return op, payload

        if isinstance(data, dict) and data.get("evt") == "ERROR":
            err = data.get("data")
            if not isinstance(err, dict):
                err = {}
            debug_log(f"Discord rejected {data.get('cmd')}: {err.get('code')} {err.get('message')}")
        else:
            debug_log(f"IPC response (op={op}): {payload}")
        return op, payload

    def close(self) -> None:
        try:
            self.sock.close()
        except OSError:
            pass


def connect_to_discord(client_id: str = APP_CLIENT_ID) -> DiscordIpc:
    rpc = DiscordIpc(discover_socket(), client_id)
    try:
        rpc.handshake()
        _, ready = rpc.read_response()
    except OSError:
        rpc.close()
        raise

    try:
        user = (json.loads(ready).get("data") or {}).get("user") or {}
        name = user.get("username", "Unknown")
        disc = user.get("discriminator", "")
        display = f"{name}#{disc}" if disc and disc != "0" else name

        print(f"[RPC] Connected as {display}")
    except (ValueError, AttributeError):
        print("[RPC] Connected")

    return rpc
