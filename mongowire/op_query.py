"""OP_QUERY, the deprecated request message type."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Any, Callable

from mongowire.check import settings
from mongowire.errors import WireError
from mongowire.flags import FLAGS_SIZE, OpQueryFlags
from mongowire.op_msg import (
    AnyDocument,
    _decode_cstring,
    _decode_deep,
    _encode_cstring,
    _encode_document,
    _find_raw,
    _log_compact,
    _log_indent,
)

_UINT32 = struct.Struct("<I")
_NUMBERS = struct.Struct("<ii")


@dataclass
class OpQuery:
    """An OP_QUERY body.

    The wire order is: flags, collection name, number to skip,
    number to return, query, optional return fields selector.
    """

    flags: OpQueryFlags = field(default_factory=OpQueryFlags)
    full_collection_name: str = ""
    number_to_skip: int = 0
    number_to_return: int = 0
    raw_query: bytes | None = None
    return_fields_selector: bytes | None = None

    def __post_init__(self) -> None:
        self.flags = OpQueryFlags(self.flags)

    def check(self) -> None:
        """Decode the query and the selector deeply, raising WireError if invalid."""
        if self.raw_query is not None:
            _decode_deep(self.raw_query)
        if self.return_fields_selector is not None:
            _decode_deep(self.return_fields_selector)

    def to_bytes(self) -> bytes:
        """Encode the message body."""
        if settings.debug:
            self.check()

        out = bytearray(_UINT32.pack(int(self.flags)))
        out += _encode_cstring(self.full_collection_name)
        try:
            out += _NUMBERS.pack(self.number_to_skip, self.number_to_return)
        except struct.error as exc:
            raise WireError(f"cannot encode numbers: {exc}") from exc
        if self.raw_query is not None:
            out += self.raw_query
        if self.return_fields_selector is not None:
            out += self.return_fields_selector
        return bytes(out)

    def query(self) -> dict[str, Any] | None:
        """Return the decoded query document, or None if there is none."""
        if self.raw_query is None:
            return None
        return _decode_deep(self.raw_query)

    def _log_structure(self) -> dict[str, Any]:
        entry: dict[str, Any] = {
            "Flags": str(self.flags),
            "FullCollectionName": self.full_collection_name,
            "NumberToSkip": self.number_to_skip,
            "NumberToReturn": self.number_to_return,
        }

        if self.raw_query is None:
            entry["QueryError"] = "no query document"
        else:
            try:
                entry["Query"] = _decode_deep(self.raw_query)
            except WireError as exc:
                entry["QueryError"] = str(exc)

        if self.return_fields_selector is not None:
            try:
                entry["ReturnFieldsSelector"] = _decode_deep(self.return_fields_selector)
            except WireError as exc:
                entry["ReturnFieldsSelectorError"] = str(exc)

        return entry

    def _log(self, render: Callable[[object], str]) -> str:
        return render(self._log_structure())

    def string_indent(self) -> str:
        """Return an indented representation for logging."""
        return self._log(_log_indent)

    def __str__(self) -> str:
        return self._log(_log_compact)


def new_op_query(doc: AnyDocument) -> OpQuery:
    """Create a query message holding ``doc`` as its query."""
    return OpQuery(raw_query=_encode_document(doc))


def decode_op_query(data: bytes) -> OpQuery:
    """Decode an OP_QUERY body."""
    data = bytes(data)
    if len(data) < FLAGS_SIZE:
        raise WireError(f"len={len(data)}")

    (raw_flags,) = _UINT32.unpack_from(data, 0)
    name = _decode_cstring(data, FLAGS_SIZE)

    number_low = FLAGS_SIZE + len(name.encode("utf-8")) + 1
    if len(data) < number_low + 8:
        raise WireError(f"len={len(data)}, can't unmarshal numbers")

    skip, to_return = _NUMBERS.unpack_from(data, number_low)

    query_low = number_low + 8
    size = _find_raw(data, query_low)
    raw_query = data[query_low : query_low + size]

    selector: bytes | None = None
    selector_low = query_low + size
    if len(data) != selector_low:
        size = _find_raw(data, selector_low)
        if len(data) != selector_low + size:
            raise WireError(f"len={len(data)}, expected={selector_low + size}")
        selector = data[selector_low:]

    query = OpQuery(
        flags=OpQueryFlags(raw_flags),
        full_collection_name=name,
        number_to_skip=skip,
        number_to_return=to_return,
        raw_query=raw_query,
        return_fields_selector=selector,
    )

    if settings.debug:
        query.check()

    return query