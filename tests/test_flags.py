import pytest

from mongowire.flags import (
    OpMsgFlagBit,
    OpMsgFlags,
    OpQueryFlagBit,
    OpQueryFlags,
    OpReplyFlagBit,
    OpReplyFlags,
    flag_names,
)


def test_op_msg_flag_bits_string():
    assert str(OpMsgFlags(0)) == "[]"
    assert str(OpMsgFlags(OpMsgFlagBit.CHECKSUM_PRESENT)) == "[checksumPresent]"
    assert str(OpMsgFlags(OpMsgFlagBit.MORE_TO_COME)) == "[moreToCome]"
    assert (
        str(OpMsgFlags(OpMsgFlagBit.CHECKSUM_PRESENT | OpMsgFlagBit.EXHAUST_ALLOWED))
        == "[checksumPresent|exhaustAllowed]"
    )


@pytest.mark.parametrize(
    ("value", "name"),
    [(1, "checksumPresent"), (2, "moreToCome"), (65536, "exhaustAllowed")],
)
def test_op_msg_flag_bit_values(value, name):
    assert flag_names(value, OpMsgFlagBit) == [name]


def test_op_reply_await_capable_string():
    assert str(OpReplyFlags(OpReplyFlagBit.AWAIT_CAPABLE)) == "[AwaitCapable]"


@pytest.mark.parametrize(
    ("bit", "name"),
    [
        (OpReplyFlagBit.CURSOR_NOT_FOUND, "CursorNotFound"),
        (OpReplyFlagBit.QUERY_FAILURE, "QueryFailure"),
        (OpReplyFlagBit.SHARD_CONFIG_STALE, "ShardConfigStale"),
        (OpReplyFlagBit.AWAIT_CAPABLE, "AwaitCapable"),
    ],
)
def test_op_reply_bit_names(bit, name):
    assert str(bit) == name


@pytest.mark.parametrize(
    ("bit", "name"),
    [
        (OpQueryFlagBit.TAILABLE_CURSOR, "TailableCursor"),
        (OpQueryFlagBit.SLAVE_OK, "SlaveOk"),
        (OpQueryFlagBit.OPLOG_REPLAY, "OplogReplay"),
        (OpQueryFlagBit.NO_CURSOR_TIMEOUT, "NoCursorTimeout"),
        (OpQueryFlagBit.AWAIT_DATA, "AwaitData"),
        (OpQueryFlagBit.EXHAUST, "Exhaust"),
        (OpQueryFlagBit.PARTIAL, "Partial"),
    ],
)
def test_op_query_bit_names(bit, name):
    assert str(bit) == name


def test_unknown_bits_are_named_by_type():
    assert str(OpMsgFlags(4)) == "[OpMsgFlagBit(4)]"
    assert str(OpQueryFlags(1)) == "[OpQueryFlagBit(1)]"
    assert str(OpReplyFlags(16)) == "[OpReplyFlagBit(16)]"


def test_flag_names_order_is_lowest_bit_first():
    value = OpMsgFlagBit.EXHAUST_ALLOWED | OpMsgFlagBit.MORE_TO_COME | OpMsgFlagBit.CHECKSUM_PRESENT
    assert flag_names(value, OpMsgFlagBit) == ["checksumPresent", "moreToCome", "exhaustAllowed"]


def test_flag_names_empty():
    assert flag_names(0, OpQueryFlagBit) == []


def test_flag_names_high_bit():
    assert flag_names(1 << 31, OpReplyFlagBit) == ["OpReplyFlagBit(2147483648)"]


def test_flag_set():
    flags = OpMsgFlags(OpMsgFlagBit.CHECKSUM_PRESENT | OpMsgFlagBit.EXHAUST_ALLOWED)
    assert flags.flag_set(OpMsgFlagBit.CHECKSUM_PRESENT) is True
    assert flags.flag_set(OpMsgFlagBit.EXHAUST_ALLOWED) is True
    assert flags.flag_set(OpMsgFlagBit.MORE_TO_COME) is False


def test_query_and_reply_flag_set():
    query = OpQueryFlags(OpQueryFlagBit.SLAVE_OK | OpQueryFlagBit.PARTIAL)
    assert query.flag_set(OpQueryFlagBit.SLAVE_OK) is True
    assert query.flag_set(OpQueryFlagBit.EXHAUST) is False
    reply = OpReplyFlags(OpReplyFlagBit.QUERY_FAILURE)
    assert reply.flag_set(OpReplyFlagBit.QUERY_FAILURE) is True
    assert reply.flag_set(OpReplyFlagBit.CURSOR_NOT_FOUND) is False


def test_flags_keep_integer_value():
    flags = OpQueryFlags(OpQueryFlagBit.AWAIT_DATA | OpQueryFlagBit.EXHAUST)
    assert int(flags) == 96
    assert str(flags) == "[AwaitData|Exhaust]"


@pytest.mark.parametrize("value", [-1, 1 << 32])
def test_flags_out_of_range(value):
    with pytest.raises(ValueError):
        OpMsgFlags(value)


def test_flags_accept_uint32_max():
    flags = OpReplyFlags(0xFFFFFFFF)
    assert len(flag_names(flags, OpReplyFlagBit)) == 32
    assert str(flags).startswith("[CursorNotFound|QueryFailure|ShardConfigStale|AwaitCapable|")