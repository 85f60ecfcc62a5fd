"""OP_REPLY, the deprecated response message type."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Any, Callable

from mongowire.check import settings
from mongowire.errors import WireError
from mongowire.flags import OpReplyFlags
from mongowire.op_msg import (
    AnyDocument,
    _decode_deep,
    _encode_document,
    _log_compact,
    _log_indent,
)

_FIXED = struct.Struct("<Iqii")


@dataclass
class OpReply:
    """An OP_REPLY body holding at most one returned document.

    The wire order is: flags, cursor ID, starting from, number returned, documents.
    """

    flags: OpReplyFlags = field(default_factory=OpReplyFlags)
    cursor_id: int = 0
    starting_from: int = 0
    encoded_document: bytes | None = None

    def __post_init__(self) -> None:
        self.flags = OpReplyFlags(self.flags)

    def check(self) -> None:
        """Decode the document deeply, raising WireError if it is invalid."""
        if self.encoded_document is not None:
            _decode_deep(self.encoded_document)

    def to_bytes(self) -> bytes:
        """Encode the message body."""
        if settings.debug:
            self.check()

        returned = 0 if self.encoded_document is None else 1
        try:
            out = _FIXED.pack(int(self.flags), self.cursor_id, self.starting_from, returned)
        except struct.error as exc:
            raise WireError(f"cannot encode reply: {exc}") from exc
        if self.encoded_document is not None:
            out += self.encoded_document
        return out

    def document(self) -> dict[str, Any] | None:
        """Return the decoded reply document, or None if there is none."""
        if self.encoded_document is None:
            return None
        return _decode_deep(self.encoded_document)

    def raw_document(self) -> bytes | None:
        """Return the encoded reply document, or None if there is none."""
        return self.encoded_document

    def set_document(self, doc: AnyDocument) -> None:
        """Encode ``doc`` and make it the reply document."""
        self.encoded_document = _encode_document(doc)

    def _log_structure(self) -> dict[str, Any]:
        entry: dict[str, Any] = {
            "ResponseFlags": str(self.flags),
            "CursorID": self.cursor_id,
            "StartingFrom": self.starting_from,
        }
        if self.encoded_document is None:
            entry["NumberReturned"] = 0
        else:
            entry["NumberReturned"] = 1
            try:
                entry["Document"] = _decode_deep(self.encoded_document)
            except WireError as exc:
                entry["DocumentError"] = str(exc)
        return entry

    def _log(self, render: Callable[[object], str]) -> str:
        return render(self._log_structure())

    def string_indent(self) -> str:
        """Return an indented representation for logging."""
        return self._log(_log_indent)

    def __str__(self) -> str:
        return self._log(_log_compact)


def new_op_reply(doc: AnyDocument) -> OpReply:
    """Create a reply message holding ``doc``."""
    return OpReply(encoded_document=_encode_document(doc))


def decode_op_reply(data: bytes) -> OpReply:
    """Decode an OP_REPLY body."""
    data = bytes(data)
    if len(data) < _FIXED.size:
        raise WireError(f"len={len(data)}")

    raw_flags, cursor_id, starting_from, returned = _FIXED.unpack_from(data, 0)
    document: bytes | None = data[_FIXED.size :] or None

    if returned < 0 or returned > 1:
        raise WireError(f"numberReturned={returned}")

    if (returned == 0) != (document is None):
        raise WireError(f"numberReturned={returned}, document={document!r}")

    reply = OpReply(
        flags=OpReplyFlags(raw_flags),
        cursor_id=cursor_id,
        starting_from=starting_from,
        encoded_document=document,
    )

    if settings.debug:
        reply.check()

    return reply