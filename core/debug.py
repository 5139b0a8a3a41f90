# core/debug.py
import os
import time
from pathlib import Path


_DEBUG = os.getenv("AMP_DEBUG") == "1"
LOG_PATH = Path(__file__).resolve().parents[1] / "amp_debug.log"


def debug_log(message: str, source: str = "RPC") -> None:
    """Append `[time] [source] message` to amp_debug.log when AMP_DEBUG=1."""
    if not _DEBUG:
        return

    tagged = f"[{source}] {message}"
    line = f"[{time.strftime('%Y-%m-%d %H:%M:%S')}] {tagged}\n"
    try:
        with LOG_PATH.open("a", encoding="utf-8") as f:
            f.write(line)
    except OSError:
        pass

    print(f"[DEBUG] {tagged}")
