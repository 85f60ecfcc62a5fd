"""Reading and writing whole wire protocol messages."""

from __future__ import annotations

import struct
from typing import BinaryIO, Union

from mongowire.errors import WireError
from mongowire.flags import FLAGS_SIZE, OpMsgFlagBit, OpMsgFlags
from mongowire.header import (
    MSG_HEADER_LEN,
    MsgHeader,
    OpCode,
    _read_exact,
    opcode_name,
    read_header,
)
from mongowire.op_msg import OpMsg, decode_op_msg
from mongowire.op_query import OpQuery, decode_op_query
from mongowire.op_reply import OpReply, decode_op_reply

MsgBody = Union[OpMsg, OpQuery, OpReply]
"""Any message body this package can read and write."""

_CHECKSUM_SIZE = 4
_UINT32 = struct.Struct("<I")

_UNHANDLED = frozenset(
    {
        OpCode.UPDATE,
        OpCode.INSERT,
        OpCode.GET_BY_OID,
        OpCode.GET_MORE,
        OpCode.DELETE,
        OpCode.KILL_CURSORS,
        OpCode.COMPRESSED,
    }
)

_CRC32C_POLY = 0x82F63B78


def _make_crc32c_table() -> tuple[int, ...]:
    table = []
    for n in range(256):
        crc = n
        for _ in range(8):
            crc = (crc >> 1) ^ _CRC32C_POLY if crc & 1 else crc >> 1
        table.append(crc)
    return tuple(table)


_CRC32C_TABLE = _make_crc32c_table()


def _crc32c(data: bytes) -> int:
    """CRC-32 with the Castagnoli polynomial."""
    crc = 0xFFFFFFFF
    for byte in data:
        crc = _CRC32C_TABLE[(crc ^ byte) & 0xFF] ^ (crc >> 8)
    return crc ^ 0xFFFFFFFF


def _get_checksum(body: bytes) -> int:
    """Return the checksum stored in the last bytes of an OP_MSG body."""
    if len(body) < _CHECKSUM_SIZE + FLAGS_SIZE:
        raise WireError("Invalid message size for an OpMsg containing a checksum")
    (value,) = _UINT32.unpack_from(body, len(body) - _CHECKSUM_SIZE)
    return value


def validate_checksum(header: MsgHeader, body: bytes) -> None:
    """Check the CRC-32C checksum of an OP_MSG, if its flags say one is present.

    The checksum covers the encoded header and the body without its last four bytes.
    Raises WireError if the body is malformed or the checksum does not match.
    """
    body = bytes(body)
    if len(body) < FLAGS_SIZE:
        raise WireError("Message contains illegal flags value")

    (raw_flags,) = _UINT32.unpack_from(body, 0)
    if not OpMsgFlags(raw_flags).flag_set(OpMsgFlagBit.CHECKSUM_PRESENT):
        return

    want = _get_checksum(body)
    got = _crc32c(header.to_bytes() + body[: len(body) - _CHECKSUM_SIZE])
    if want != got:
        raise WireError("OP_MSG checksum does not match contents.")


def read_message(stream: BinaryIO) -> tuple[MsgHeader, MsgBody]:
    """Read one message from a binary stream and return its header and body.

    Raises ZeroReadError if the stream was already at its end.
    """
    header = read_header(stream)

    size = header.message_length - MSG_HEADER_LEN
    body = _read_exact(stream, size)
    if len(body) < size:
        reason = "EOF" if not body else "unexpected EOF"
        raise WireError(f"expected {size}, read {len(body)}: {reason}")

    opcode = header.opcode
    if opcode == OpCode.REPLY:
        # not sent by clients, but replies may come through a proxy
        return header, decode_op_reply(body)
    if opcode == OpCode.MSG:
        validate_checksum(header, body)
        return header, decode_op_msg(body)
    if opcode == OpCode.QUERY:
        return header, decode_op_query(body)
    if opcode in _UNHANDLED:
        raise WireError(f"unhandled opcode {opcode_name(opcode)}")
    raise WireError(f"unexpected opcode {opcode_name(opcode)}")


def write_message(stream: BinaryIO, header: MsgHeader, body: MsgBody) -> None:
    """Validate a header and body and write them to a binary stream.

    Raises ValueError if the header length does not match the encoded body.
    """
    encoded = body.to_bytes()

    expected = len(encoded) + MSG_HEADER_LEN
    if expected != header.message_length:
        raise ValueError(
            f"expected length {len(encoded)} (marshaled body size) + {MSG_HEADER_LEN} "
            f"(fixed marshaled header size) = {expected}, got {header.message_length}"
        )

    if header.opcode == OpCode.MSG:
        validate_checksum(header, encoded)

    header.write_to(stream)
    stream.write(encoded)