"""OP_MSG, the main message type of the wire protocol."""

from __future__ import annotations

import base64
import datetime
import json
import struct
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Union

import bson
from bson.binary import Binary
from bson.errors import BSONError
from bson.objectid import ObjectId

from mongowire.check import check_nan, settings
from mongowire.errors import WireError
from mongowire.flags import FLAGS_SIZE, OpMsgFlagBit, OpMsgFlags

AnyDocument = Union[Mapping[str, Any], bytes, bytearray, memoryview]

_UINT32 = struct.Struct("<I")
_INT32 = struct.Struct("<i")
_CHECKSUM_SIZE = 4


@dataclass
class OpMsgSection:
    """One section of an OP_MSG: kind 0 holds one document, kind 1 a named sequence."""

    kind: int = 0
    identifier: str = ""
    documents: list[bytes] = field(default_factory=list)


def check_sections(sections: list[OpMsgSection] | tuple[OpMsgSection, ...]) -> None:
    """Raise WireError unless ``sections`` form a valid OP_MSG section list."""
    if not sections:
        raise WireError("no sections")

    kind0_found = False
    for section in sections:
        if section.kind == 0:
            if kind0_found:
                raise WireError("multiple kind 0 sections")
            kind0_found = True
            if section.identifier != "":
                raise WireError("kind 0 section has identifier")
            if len(section.documents) != 1:
                raise WireError(f"kind 0 section has {len(section.documents)} documents")
        elif section.kind == 1:
            if section.identifier == "":
                raise WireError("kind 1 section has no identifier")
        else:
            raise WireError(f"unknown kind {section.kind}")


def _encode_document(doc: AnyDocument) -> bytes:
    if isinstance(doc, (bytes, bytearray, memoryview)):
        return bytes(doc)
    try:
        return bson.encode(doc)
    except (BSONError, TypeError, ValueError, OverflowError) as exc:
        raise WireError(f"cannot encode document: {exc}") from exc


def _decode_deep(raw: bytes) -> dict[str, Any]:
    try:
        return bson.decode(raw)
    except (BSONError, ValueError, OverflowError, struct.error) as exc:
        raise WireError(f"cannot decode document: {exc}") from exc


def _find_raw(data: bytes, offset: int) -> int:
    """Return the length of the BSON document starting at ``offset``."""
    if len(data) - offset < 5:
        raise WireError("invalid BSON document: too short")
    (size,) = _INT32.unpack_from(data, offset)
    if size < 5 or offset + size > len(data):
        raise WireError(f"invalid BSON document: size {size}")
    if data[offset + size - 1] != 0:
        raise WireError("invalid BSON document: missing terminator")
    return size


def _decode_cstring(data: bytes, offset: int) -> str:
    end = data.find(b"\x00", offset)
    if end == -1:
        raise WireError("invalid cstring: missing terminator")
    try:
        return data[offset:end].decode("utf-8")
    except UnicodeDecodeError as exc:
        raise WireError(f"invalid cstring: {exc}") from exc


def _encode_cstring(value: str) -> bytes:
    if "\x00" in value:
        raise WireError(f"cstring {value!r} contains a NUL byte")
    return value.encode("utf-8") + b"\x00"


def _log_default(value: object) -> str:
    if isinstance(value, ObjectId):
        return f"ObjectId({value})"
    if isinstance(value, Binary):
        return f"Binary({value.subtype}:{base64.b64encode(bytes(value)).decode('ascii')})"
    if isinstance(value, (bytes, bytearray)):
        return base64.b64encode(bytes(value)).decode("ascii")
    if isinstance(value, datetime.datetime):
        return value.isoformat()
    return str(value)


def _log_indent(value: object) -> str:
    return json.dumps(value, indent=2, default=_log_default, ensure_ascii=False)


def _log_compact(value: object) -> str:
    return json.dumps(value, default=_log_default, ensure_ascii=False)


@dataclass
class OpMsg:
    """An OP_MSG body: flags, sections and an optional checksum."""

    flags: OpMsgFlags = field(default_factory=OpMsgFlags)
    sections: list[OpMsgSection] = field(default_factory=list)
    checksum: int = 0

    def __post_init__(self) -> None:
        self.flags = OpMsgFlags(self.flags)
        self.sections = list(self.sections)

    def set_sections(self, *args: OpMsgSection) -> None:
        """Validate and replace the sections of the message."""
        sections = list(args)
        check_sections(sections)
        self.sections = sections
        if settings.debug or settings.check_nans:
            self.check()

    def raw_section0(self) -> bytes | None:
        """Return the document of the first kind 0 section, or None."""
        for section in self.sections:
            if section.kind == 0:
                return section.documents[0]
        return None

    def raw_sections(self) -> tuple[bytes | None, bytes]:
        """Return the kind 0 document and all kind 1 documents concatenated."""
        spec: bytes | None = None
        seq = bytearray()
        for section in self.sections:
            if section.kind == 0:
                spec = section.documents[0]
            elif section.kind == 1:
                for doc in section.documents:
                    seq += doc
        return spec, bytes(seq)

    def raw_document(self) -> bytes:
        """Return the single document of a message made of one kind 0 section."""
        check_sections(self.sections)
        first = self.sections[0]
        if first.kind != 0 or first.identifier != "":
            raise WireError(f'expected section 0/"", got {first.kind}/{first.identifier!r}')
        return first.documents[0]

    def decode_document(self) -> dict[str, Any]:
        """Return the single document of the message, fully decoded."""
        return _decode_deep(self.raw_document())

    def check(self) -> None:
        """Decode every document deeply; reject NaNs if that switch is on."""
        for section in self.sections:
            for raw in section.documents:
                doc = _decode_deep(raw)
                if settings.check_nans:
                    check_nan(doc)

    def to_bytes(self) -> bytes:
        """Encode the message body."""
        check_sections(self.sections)
        if settings.debug:
            self.check()

        out = bytearray(_UINT32.pack(int(self.flags)))
        for section in self.sections:
            out.append(section.kind)
            if section.kind == 0:
                out += section.documents[0]
            elif section.kind == 1:
                seq = bytearray(_encode_cstring(section.identifier))
                for doc in section.documents:
                    seq += doc
                out += _UINT32.pack(len(seq) + 4)
                out += seq
            else:
                raise WireError(f"kind is {section.kind}")

        if self.flags.flag_set(OpMsgFlagBit.CHECKSUM_PRESENT):
            out += _UINT32.pack(self.checksum)

        return bytes(out)

    def _log_structure(self) -> dict[str, Any]:
        sections = []
        for section in self.sections:
            entry: dict[str, Any] = {"Kind": section.kind}
            if section.kind == 0:
                try:
                    entry["Document"] = _decode_deep(section.documents[0])
                except WireError as exc:
                    entry["DocumentError"] = str(exc)
            elif section.kind == 1:
                entry["Identifier"] = section.identifier
                docs: list[Any] = []
                for raw in section.documents:
                    try:
                        docs.append(_decode_deep(raw))
                    except WireError as exc:
                        docs.append({"error": str(exc)})
                entry["Documents"] = docs
            else:
                raise ValueError(f"unknown kind {section.kind}")
            sections.append(entry)

        return {
            "FlagBits": str(self.flags),
            "Checksum": self.checksum,
            "Sections": sections,
        }

    def _log(self, render: Callable[[object], str]) -> str:
        return render(self._log_structure())

    def string_indent(self) -> str:
        """Return an indented representation for logging."""
        return self._log(_log_indent)

    def __str__(self) -> str:
        return self._log(_log_compact)


def new_op_msg(doc: AnyDocument) -> OpMsg:
    """Create a message with one kind 0 section holding ``doc``."""
    raw = _encode_document(doc)
    msg = OpMsg()
    msg.set_sections(OpMsgSection(documents=[raw]))
    return msg


def decode_op_msg(data: bytes) -> OpMsg:
    """Decode an OP_MSG body."""
    data = bytes(data)
    if len(data) < 6:
        raise WireError(f"len={len(data)}")

    (raw_flags,) = _UINT32.unpack_from(data, 0)
    flags = OpMsgFlags(raw_flags)
    has_checksum = flags.flag_set(OpMsgFlagBit.CHECKSUM_PRESENT)
    end = len(data) - _CHECKSUM_SIZE if has_checksum else len(data)

    sections: list[OpMsgSection] = []
    offset = FLAGS_SIZE

    while True:
        if offset >= len(data):
            raise WireError(f"len(b) = {len(data)}, offset = {offset}")

        kind = data[offset]
        offset += 1

        if kind == 0:
            size = _find_raw(data, offset)
            section = OpMsgSection(kind=0, documents=[data[offset : offset + size]])
            offset += size

        elif kind == 1:
            if len(data) < offset + 4:
                raise WireError(f"len(b) = {len(data)}, offset = {offset}")
            (declared,) = _UINT32.unpack_from(data, offset)
            remaining = declared - 4
            if remaining < 5:
                raise WireError(f"size = {remaining}")
            offset += 4

            identifier = _decode_cstring(data, offset)
            id_size = len(identifier.encode("utf-8")) + 1
            offset += id_size
            remaining -= id_size

            section = OpMsgSection(kind=1, identifier=identifier)
            while remaining != 0:
                if remaining < 0:
                    raise WireError(f"size = {remaining}")
                size = _find_raw(data, offset)
                section.documents.append(data[offset : offset + size])
                offset += size
                remaining -= size

        else:
            raise WireError(f"kind is {kind}")

        sections.append(section)

        if offset == end:
            break

    checksum = 0
    if has_checksum:
        (checksum,) = _UINT32.unpack_from(data, offset)

    check_sections(sections)
    msg = OpMsg(flags=flags, sections=sections, checksum=checksum)

    if settings.debug or settings.check_nans:
        msg.check()

    return msg