"""Flag bits and flag sets of the OP_MSG, OP_QUERY and OP_REPLY messages."""

from __future__ import annotations

import enum

FLAGS_SIZE = 4
"""Size of an encoded flag set in bytes."""

_MAX_FLAGS = 0xFFFFFFFF


class OpMsgFlagBit(enum.IntEnum):
    """A single OP_MSG flag bit."""

    CHECKSUM_PRESENT = 1 << 0
    MORE_TO_COME = 1 << 1
    EXHAUST_ALLOWED = 1 << 16

    def __str__(self) -> str:
        return _LABELS[type(self)][self.value]


class OpQueryFlagBit(enum.IntEnum):
    """A single OP_QUERY flag bit."""

    TAILABLE_CURSOR = 1 << 1
    SLAVE_OK = 1 << 2
    OPLOG_REPLAY = 1 << 3
    NO_CURSOR_TIMEOUT = 1 << 4
    AWAIT_DATA = 1 << 5
    EXHAUST = 1 << 6
    PARTIAL = 1 << 7

    def __str__(self) -> str:
        return _LABELS[type(self)][self.value]


class OpReplyFlagBit(enum.IntEnum):
    """A single OP_REPLY flag bit."""

    CURSOR_NOT_FOUND = 1 << 0
    QUERY_FAILURE = 1 << 1
    SHARD_CONFIG_STALE = 1 << 2
    AWAIT_CAPABLE = 1 << 3

    def __str__(self) -> str:
        return _LABELS[type(self)][self.value]


_LABELS: dict[type, dict[int, str]] = {
    OpMsgFlagBit: {
        OpMsgFlagBit.CHECKSUM_PRESENT.value: "checksumPresent",
        OpMsgFlagBit.MORE_TO_COME.value: "moreToCome",
        OpMsgFlagBit.EXHAUST_ALLOWED.value: "exhaustAllowed",
    },
    OpQueryFlagBit: {
        OpQueryFlagBit.TAILABLE_CURSOR.value: "TailableCursor",
        OpQueryFlagBit.SLAVE_OK.value: "SlaveOk",
        OpQueryFlagBit.OPLOG_REPLAY.value: "OplogReplay",
        OpQueryFlagBit.NO_CURSOR_TIMEOUT.value: "NoCursorTimeout",
        OpQueryFlagBit.AWAIT_DATA.value: "AwaitData",
        OpQueryFlagBit.EXHAUST.value: "Exhaust",
        OpQueryFlagBit.PARTIAL.value: "Partial",
    },
    OpReplyFlagBit: {
        OpReplyFlagBit.CURSOR_NOT_FOUND.value: "CursorNotFound",
        OpReplyFlagBit.QUERY_FAILURE.value: "QueryFailure",
        OpReplyFlagBit.SHARD_CONFIG_STALE.value: "ShardConfigStale",
        OpReplyFlagBit.AWAIT_CAPABLE.value: "AwaitCapable",
    },
}


def flag_names(value: int, bit_type: type[enum.IntEnum]) -> list[str]:
    """Return the names of the bits set in ``value``, lowest bit first.

    Bits that ``bit_type`` does not define are named ``TypeName(bit)``.
    """
    names = []
    for shift in range(32):
        if (value >> shift) & 1:
            bit = 1 << shift
            try:
                names.append(str(bit_type(bit)))
            except ValueError:
                names.append(f"{bit_type.__name__}({bit})")
    return names


class _Flags(int):
    """A 32-bit unsigned set of flag bits."""

    _bit_type: type[enum.IntEnum]

    def __new__(cls, value: int = 0):
        value = int(value)
        if not 0 <= value <= _MAX_FLAGS:
            raise ValueError(f"{cls.__name__} value {value} is out of the uint32 range")
        return super().__new__(cls, value)

    def flag_set(self, bit: int) -> bool:
        """Return True if ``bit`` is set."""
        return bool(self & int(bit))

    def __str__(self) -> str:
        return "[" + "|".join(flag_names(self, self._bit_type)) + "]"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({int(self)})"


class OpMsgFlags(_Flags):
    """Flags of an OP_MSG message."""

    _bit_type = OpMsgFlagBit

    def flag_set(self, bit: int) -> bool:
        """Return True if ``bit`` is set."""
        return super().flag_set(bit)


class OpQueryFlags(_Flags):
    """Flags of an OP_QUERY message."""

    _bit_type = OpQueryFlagBit

    def flag_set(self, bit: int) -> bool:
        """Return True if ``bit`` is set."""
        return super().flag_set(bit)


class OpReplyFlags(_Flags):
    """Flags of an OP_REPLY message."""

    _bit_type = OpReplyFlagBit

    def flag_set(self, bit: int) -> bool:
        """Return True if ``bit`` is set."""
        return super().flag_set(bit)