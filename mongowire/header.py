"""The common header of every wire protocol message."""

from __future__ import annotations

import enum
import struct
from dataclasses import dataclass
from typing import BinaryIO

from mongowire.errors import WireError, ZeroReadError

MSG_HEADER_LEN = 16
"""Length of an encoded header in bytes."""

MAX_MSG_LEN = 48_000_000
"""Maximum length of a whole message in bytes."""

_HEADER = struct.Struct("<iiii")


class OpCode(enum.IntEnum):
    """Wire operation codes."""

    REPLY = 1
    UPDATE = 2001
    INSERT = 2002
    GET_BY_OID = 2003
    QUERY = 2004
    GET_MORE = 2005
    DELETE = 2006
    KILL_CURSORS = 2007
    COMPRESSED = 2012
    MSG = 2013

    def __str__(self) -> str:
        return f"OP_{self.name}"


def opcode_name(value: int) -> str:
    """Return the protocol name of an operation code, e.g. ``OP_MSG``.

    Unknown codes are named ``OpCode(<value>)``.
    """
    try:
        return str(OpCode(value))
    except ValueError:
        return f"OpCode({int(value)})"


def _read_exact(stream: BinaryIO, size: int) -> bytes:
    """Read up to ``size`` bytes, retrying short reads until EOF."""
    chunks = []
    remaining = size
    while remaining > 0:
        chunk = stream.read(remaining)
        if not chunk:
            break
        chunks.append(chunk)
        remaining -= len(chunk)
    return b"".join(chunks)


@dataclass
class MsgHeader:
    """The header that precedes every message body."""

    message_length: int = 0
    request_id: int = 0
    response_to: int = 0
    opcode: int = 0

    def __post_init__(self) -> None:
        try:
            self.opcode = OpCode(self.opcode)
        except ValueError:
            self.opcode = int(self.opcode)

    def to_bytes(self) -> bytes:
        """Encode the header as 16 little-endian bytes."""
        try:
            return _HEADER.pack(
                self.message_length, self.request_id, self.response_to, int(self.opcode)
            )
        except struct.error as exc:
            raise WireError(f"cannot encode header: {exc}") from exc

    def write_to(self, stream: BinaryIO) -> None:
        """Write the encoded header to a binary stream."""
        stream.write(self.to_bytes())

    def __str__(self) -> str:
        return (
            f"length: {self.message_length:5d}, id: {self.request_id:4d}, "
            f"response_to: {self.response_to:4d}, opcode: {opcode_name(self.opcode)}"
        )


def read_header(stream: BinaryIO) -> MsgHeader:
    """Read and validate a header from a binary stream.

    Raises ZeroReadError if the stream was already at its end.
    """
    data = _read_exact(stream, MSG_HEADER_LEN)
    if not data:
        raise ZeroReadError()
    if len(data) < MSG_HEADER_LEN:
        raise WireError(
            f"expected {MSG_HEADER_LEN}, read {len(data)}: unexpected EOF"
        )

    length, request_id, response_to, opcode = _HEADER.unpack(data)
    header = MsgHeader(length, request_id, response_to, opcode)

    if length < MSG_HEADER_LEN or length > MAX_MSG_LEN:
        raise WireError(f"invalid message length {length}")

    return header