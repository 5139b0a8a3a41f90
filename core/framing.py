# core/framing.py
"""
Discord IPC framing: every message is an 8-byte little-endian header
(opcode, payload length) followed by the UTF-8 JSON payload.
"""
import socket
import struct
from typing import Tuple

OP_HANDSHAKE = 0
OP_FRAME = 1

HEADER = struct.Struct("<II")


class FrameError(ConnectionError):
    """The peer closed the socket before a whole frame arrived."""


def encode_frame(opcode: int, payload: bytes) -> bytes:
    return HEADER.pack(opcode, len(payload)) + payload


def write_frame(sock: socket.socket, opcode: int, payload: bytes) -> None:
    sock.sendall(encode_frame(opcode, payload))


def _recv_exact(sock: socket.socket, size: int) -> bytes:
    data = b""
    while len(data) < size:
        chunk = sock.recv(size - len(data))
        if not chunk:
            raise FrameError(f"connection closed after {len(data)} of {size} bytes")
        data += chunk
    return data


def read_frame(sock: socket.socket) -> Tuple[int, str]:
    opcode, length = HEADER.unpack(_recv_exact(sock, HEADER.size))
    payload = _recv_exact(sock, length) if length else b""
    return opcode, payload.decode("utf-8", errors="replace")
