import socket
import struct

import pytest

from core.framing import HEADER, OP_FRAME, OP_HANDSHAKE, FrameError, encode_frame, read_frame, write_frame


@pytest.fixture
def pair():
    a, b = socket.socketpair()
    yield a, b
    a.close()
    b.close()


class TestFrameEncoding:
    def test_header_is_little_endian_opcode_then_length(self):
        frame = encode_frame(OP_FRAME, b"{}")
        assert frame[:8] == b"\x01\x00\x00\x00\x02\x00\x00\x00"
        assert frame[8:] == b"{}"

    def test_length_counts_bytes_not_characters(self):
        payload = '{"state":"A • B"}'.encode("utf-8")
        frame = encode_frame(OP_HANDSHAKE, payload)
        assert struct.unpack("<II", frame[:8]) == (0, len(payload))
        assert len(payload) > len('{"state":"A • B"}')


class TestReadWrite:
    def test_round_trip(self, pair):
        a, b = pair
        payload = '{"cmd":"SET_ACTIVITY","state":"Artist • Album"}'.encode("utf-8")
        write_frame(a, 7, payload)
        op, text = read_frame(b)
        assert op == 7
        assert text.encode("utf-8") == payload

    def test_each_read_returns_one_message(self, pair):
        a, b = pair
        write_frame(a, OP_HANDSHAKE, b'{"v":1}')
        write_frame(a, OP_FRAME, b'{"n":2}')
        assert read_frame(b) == (OP_HANDSHAKE, '{"v":1}')
        assert read_frame(b) == (OP_FRAME, '{"n":2}')

    def test_empty_payload(self, pair):
        a, b = pair
        write_frame(a, OP_FRAME, b"")
        assert read_frame(b) == (OP_FRAME, "")

    def test_invalid_utf8_is_replaced(self, pair):
        a, b = pair
        write_frame(a, OP_FRAME, b"ok\xff")
        op, text = read_frame(b)
        assert op == OP_FRAME
        assert text == "ok\ufffd"

    def test_payload_split_across_sends(self, pair):
        a, b = pair
        frame = encode_frame(OP_FRAME, b'{"split":true}')
        a.sendall(frame[:5])
        a.sendall(frame[5:11])
        a.sendall(frame[11:])
        assert read_frame(b) == (OP_FRAME, '{"split":true}')


class TestShortReads:
    def test_close_after_partial_header(self, pair):
        a, b = pair
        a.sendall(b"\x01\x00\x00\x00")
        a.close()
        with pytest.raises(FrameError):
            read_frame(b)

    def test_close_before_full_payload(self, pair):
        a, b = pair
        a.sendall(HEADER.pack(OP_FRAME, 10) + b"abc")
        a.close()
        with pytest.raises(FrameError):
            read_frame(b)

    def test_frame_error_is_an_os_error(self, pair):
        a, b = pair
        a.close()
        with pytest.raises(OSError):
            read_frame(b)
