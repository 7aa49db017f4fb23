import asyncio
import io
import struct

import pytest

from rinktools.sandbox.errors import DecodeFailed, ReadFailed, WriteFailed
from rinktools.sandbox.frame import (
    encode_frame,
    read_frame,
    read_frame_async,
    write_frame,
    write_frame_async,
)


class _BrokenWriter:
    def write(self, data):
        raise OSError("pipe closed")

    def flush(self):
        pass


class _Collector:
    def __init__(self):
        self.data = bytearray()

    def write(self, data):
        self.data.extend(data)

    async def drain(self):
        pass


class _TrickleReader:
    """Hands out at most one byte per read call."""

    def __init__(self, data):
        self._buffer = io.BytesIO(data)

    def read(self, size):
        return self._buffer.read(min(size, 1))


def test_header_holds_native_payload_length():
    frame = encode_frame({"a": 1})
    (length,) = struct.unpack("=I", frame[:4])
    assert length == len(frame) - 4


@pytest.mark.parametrize("value", [(1, 2), "text", {"k": [1, 2.5, None]}, b"\x00\x01"])
def test_round_trip(value):
    stream = io.BytesIO()
    write_frame(stream, value)
    stream.seek(0)
    assert read_frame(stream) == value


def test_frames_read_in_order():
    stream = io.BytesIO()
    write_frame(stream, "first")
    write_frame(stream, "second")
    stream.seek(0)
    assert read_frame(stream) == "first"
    assert read_frame(stream) == "second"


def test_partial_reads_are_joined():
    reader = _TrickleReader(encode_frame([3, 4, 5]))
    assert read_frame(reader) == [3, 4, 5]


def test_empty_stream_is_unexpected_eof():
    with pytest.raises(ReadFailed) as info:
        read_frame(io.BytesIO(b""))
    assert isinstance(info.value.__cause__, EOFError)


def test_truncated_payload_is_unexpected_eof():
    frame = encode_frame("a long enough value")
    with pytest.raises(ReadFailed) as info:
        read_frame(io.BytesIO(frame[:-3]))
    assert isinstance(info.value.__cause__, EOFError)


def test_garbage_payload_fails_to_decode():
    payload = b"\xff\xff"
    data = struct.pack("=I", len(payload)) + payload
    with pytest.raises(DecodeFailed):
        read_frame(io.BytesIO(data))


def test_unserializable_value_fails():
    with pytest.raises(DecodeFailed):
        encode_frame(lambda: None)


def test_write_failure_is_reported():
    with pytest.raises(WriteFailed) as info:
        write_frame(_BrokenWriter(), 1)
    assert isinstance(info.value.__cause__, OSError)


@pytest.mark.asyncio
async def test_async_round_trip():
    writer = _Collector()
    await write_frame_async(writer, ("x", 7))
    reader = asyncio.StreamReader()
    reader.feed_data(bytes(writer.data))
    reader.feed_eof()
    assert await read_frame_async(reader) == ("x", 7)


@pytest.mark.asyncio
async def test_async_bytes_match_sync_bytes():
    writer = _Collector()
    await write_frame_async(writer, {"n": 1})
    assert bytes(writer.data) == encode_frame({"n": 1})


@pytest.mark.asyncio
async def test_async_truncated_frame():
    reader = asyncio.StreamReader()
    reader.feed_data(encode_frame("value")[:5])
    reader.feed_eof()
    with pytest.raises(ReadFailed) as info:
        await read_frame_async(reader)
    assert isinstance(info.value.__cause__, EOFError)