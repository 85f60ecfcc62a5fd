# mongowire

A small library for reading, writing and validating MongoDB wire protocol
messages. It handles the 16-byte message header and three body types:

- `OP_MSG` (`mongowire.op_msg.OpMsg`), with kind 0 and kind 1 sections and
  the optional CRC-32C checksum;
- `OP_QUERY` (`mongowire.op_query.OpQuery`), the legacy request format still
  used for handshakes;
- `OP_REPLY` (`mongowire.op_reply.OpReply`), the legacy response format, with
  at most one document.

Documents are kept as raw BSON bytes and decoded with the `bson` module that
ships with `pymongo`.

## Installation

```
pip install mongowire
```

## Reading and writing messages

```python
import io

from mongowire.header import MsgHeader, OpCode
from mongowire.message import read_message, write_message
from mongowire.op_msg import new_op_msg

msg = new_op_msg({"ping": 1, "$db": "admin"})
body = msg.to_bytes()
header = MsgHeader(
    message_length=16 + len(body),
    request_id=1,
    response_to=0,
    opcode=OpCode.MSG,
)

stream = io.BytesIO()
write_message(stream, header, msg)

stream.seek(0)
got_header, got_body = read_message(stream)
print(got_header)                  # length:    38, id:    1, response_to:    0, opcode: OP_MSG
print(got_body.string_indent())    # indented JSON-like view for logging
print(got_body.decode_document())  # {'ping': 1, '$db': 'admin'}
```

`read_message(stream)` returns a `(MsgHeader, body)` pair, where the body is an
`OpMsg`, `OpQuery` or `OpReply` according to the opcode.

- It raises `mongowire.errors.ZeroReadError` when the stream is already at its
  end, which is how a closed connection shows up.
- Every other problem with the bytes raises `mongowire.errors.WireError`: a
  message length outside 16..48,000,000, a short read, an unknown opcode, a
  checksum that does not match, or a body that does not have the expected
  structure. `WireError.root_message()` returns the message of the innermost
  cause in the exception chain.

`write_message(stream, header, body)` encodes the body, raises `ValueError` if
`header.message_length` is not the body length plus 16, checks the checksum of
an `OP_MSG` whose checksum flag is set, and writes header and body.
`mongowire.message.validate_checksum(header, body)` runs that checksum check on
its own.

### Message bodies

- `OpMsg` has `flags`, `sections` (a list of `OpMsgSection` with `kind`,
  `identifier` and `documents`) and `checksum`. `set_sections(*sections)`
  validates with `check_sections`; `raw_section0()`, `raw_sections()`,
  `raw_document()` and `decode_document()` give access to the documents.
  `decode_op_msg(data)` decodes a body; `new_op_msg(doc)` builds one from a
  mapping or encoded BSON.
- `OpQuery` has `flags`, `full_collection_name`, `number_to_skip`,
  `number_to_return`, `raw_query` and `return_fields_selector`; `query()`
  returns the decoded query. Built with `new_op_query(doc)`, decoded with
  `decode_op_query(data)`.
- `OpReply` has `flags`, `cursor_id`, `starting_from` and `encoded_document`;
  `document()`, `raw_document()` and `set_document(doc)` work with it. Built
  with `new_op_reply(doc)`, decoded with `decode_op_reply(data)`.

Every body has `to_bytes()`, `check()` (decode all documents deeply),
`string_indent()` and a compact `str()` for logging. `MsgHeader` has
`to_bytes()` and `write_to(stream)`; `mongowire.header.read_header(stream)`
reads one on its own and `opcode_name(value)` names an opcode.

## Flags

`mongowire.flags` holds the flag bits of each message type (`OpMsgFlagBit`,
`OpQueryFlagBit`, `OpReplyFlagBit`) and flag sets (`OpMsgFlags`,
`OpQueryFlags`, `OpReplyFlags`) that print the way the protocol names them:

```python
from mongowire.flags import OpMsgFlagBit, OpMsgFlags

flags = OpMsgFlags(OpMsgFlagBit.CHECKSUM_PRESENT | OpMsgFlagBit.EXHAUST_ALLOWED)
print(flags)                                      # [checksumPresent|exhaustAllowed]
print(flags.flag_set(OpMsgFlagBit.MORE_TO_COME))  # False
```

`flag_names(value, bit_type)` lists the names of the set bits, lowest first.

## Extra checks

`mongowire.check.settings` holds two process-wide switches, both off by
default:

- `settings.debug`: decode every document deeply while encoding and decoding
  messages;
- `settings.check_nans`: reject `OP_MSG` documents that contain a float NaN.

`mongowire.check.check_nan(value)` raises `WireError` if a NaN appears anywhere
in a mapping, list, float or encoded BSON document.

## Recorded traffic and fixtures

`mongowire.records.load_records(directory, limit=0)` walks a directory
recursively for `.bin` files of captured traffic (picking `limit` of them at
random if `limit` is positive and there are more) and returns a `Record`
(`header`, `body`, `header_bytes`, `body_bytes`) for each message. Reading a
file stops at its end or at the first message that cannot be read. A missing
directory gives an empty list. `load_record_file(path)` reads a single file.

`mongowire.dump.parse_dump(text)` and `parse_dump_file(*parts)` turn
Wireshark-style and hexdump-style text dumps back into bytes;
`unindent(text)` strips the common leading tabs from a block of text.

## What it does not do

- It is a message codec only: there is no client, server or proxy, and no
  connection handling beyond reading from and writing to a binary stream.
- It does not compute `OP_MSG` checksums. `OpMsg.to_bytes()` writes the stored
  `checksum` value; the checksum is only verified when reading and writing.
- `OP_UPDATE`, `OP_INSERT`, `OP_GET_BY_OID`, `OP_GET_MORE`, `OP_DELETE`,
  `OP_KILL_CURSORS` and `OP_COMPRESSED` are recognised but not decoded:
  `read_message` raises `WireError` for them.