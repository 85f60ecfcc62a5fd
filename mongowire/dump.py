"""Parsing of hex dumps and indented text used for fixtures."""

from __future__ import annotations

import os
from pathlib import Path

from mongowire.errors import WireError


def parse_dump(text: str) -> bytes:
    """Decode a Wireshark-style or hexdump-style dump into bytes."""
    result = bytearray()
    for raw_line in text.strip().splitlines():
        line = raw_line.strip()
        if not line:
            continue

        if line.endswith("|"):
            hex_part = line[8:60]
        else:
            hex_part = line[7:54]
        hex_part = hex_part.strip().replace(" ", "")

        try:
            result += bytes.fromhex(hex_part)
        except ValueError as exc:
            raise WireError(f"invalid hex in dump line {line!r}: {exc}") from exc

    return bytes(result)


def parse_dump_file(*args: str | os.PathLike[str]) -> bytes:
    """Read a dump file whose path is joined from ``args`` and decode it."""
    return parse_dump(Path(*args).read_text())


def unindent(text: str) -> str:
    """Remove the leading tabs of the first line from every line of ``text``."""
    if text == "":
        raise ValueError("input must not be empty")

    lines = text.split("\n")
    if lines[0] == "":
        lines = lines[1:]
    if not lines:
        raise ValueError("zero parts")

    indent = len(lines[0]) - len(lines[0].lstrip("\t"))

    result = []
    for line in lines:
        if len(line) <= indent:
            raise ValueError(f"invalid indent on line {line!r}")
        result.append(line[indent:])

    return "\n".join(result)