"""Length-prefixed framing of values exchanged with the child process."""

from __future__ import annotations

import asyncio
import pickle
import struct
from typing import Any, BinaryIO

from .errors import DecodeFailed, ReadFailed, WriteFailed

_HEADER = struct.Struct("=I")


def encode_frame(value: Any) -> bytes:
    """Serialize *value* and prefix it with its native-endian 32-bit length."""
    try:
        payload = pickle.dumps(value, protocol=pickle.HIGHEST_PROTOCOL)
        header = _HEADER.pack(len(payload))
    except Exception as exc:
        raise DecodeFailed(exc) from exc
    return header + payload


def _decode(payload: bytes) -> Any:
    try:
        return pickle.loads(payload)
    except Exception as exc:
        raise DecodeFailed(exc) from exc


def _read_exact(reader: BinaryIO, size: int) -> bytes:
    chunks = []
    remaining = size
    try:
        while remaining:
            chunk = reader.read(remaining)
            if not chunk:
                raise EOFError("unexpected end of stream")
            chunks.append(chunk)
            remaining -= len(chunk)
    except (OSError, EOFError) as exc:
        raise ReadFailed(exc) from exc
    return b"".join(chunks)


def read_frame(reader: BinaryIO) -> Any:
    """Read one framed value from a binary stream."""
    (length,) = _HEADER.unpack(_read_exact(reader, _HEADER.size))
    return _decode(_read_exact(reader, length))


def write_frame(writer: BinaryIO, value: Any) -> None:
    """Write one framed value to a binary stream and flush it."""
    data = encode_frame(value)
    try:
        writer.write(data)
        writer.flush()
    except OSError as exc:
        raise WriteFailed(exc) from exc


async def read_frame_async(reader: asyncio.StreamReader) -> Any:
    """Read one framed value from an asyncio stream."""
    try:
        header = await reader.readexactly(_HEADER.size)
        (length,) = _HEADER.unpack(header)
        payload = await reader.readexactly(length)
    except (asyncio.IncompleteReadError, OSError) as exc:
        raise ReadFailed(exc) from exc
    return _decode(payload)


async def write_frame_async(writer: asyncio.StreamWriter, value: Any) -> None:
    """Write one framed value to an asyncio stream and wait until it drains."""
    data = encode_frame(value)
    try:
        writer.write(data)
        await writer.drain()
    except OSError as exc:
        raise WriteFailed(exc) from exc