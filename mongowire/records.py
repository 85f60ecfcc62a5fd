"""Loading of recorded wire protocol messages from .bin files."""

from __future__ import annotations

import os
import random
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path

from mongowire.errors import WireError
from mongowire.header import MsgHeader
from mongowire.message import MsgBody, read_message


@dataclass
class Record:
    """A single recorded message, with its header and body re-encoded."""

    header: MsgHeader
    body: MsgBody
    header_bytes: bytes
    body_bytes: bytes


def _extension(name: str) -> str:
    dot = name.rfind(".")
    return name[dot:] if dot >= 0 else ""


def _walk(path: Path) -> Iterator[Path]:
    """Yield every non-directory path under ``path`` in lexical order."""
    if not path.is_dir():
        if not os.path.lexists(path):
            raise FileNotFoundError(str(path))
        yield path
        return

    with os.scandir(path) as it:
        entries = sorted(it, key=lambda entry: entry.name)
    for entry in entries:
        if entry.is_dir(follow_symlinks=False):
            yield from _walk(Path(entry.path))
        else:
            yield Path(entry.path)


def load_record_file(path: str | os.PathLike[str]) -> list[Record]:
    """Read the messages of one recording file until its end or the first invalid one."""
    records = []
    with open(path, "rb") as stream:
        while True:
            try:
                header, body = read_message(stream)
            except WireError:
                break
            records.append(Record(header, body, header.to_bytes(), body.to_bytes()))
    return records


def load_records(directory: str | os.PathLike[str], limit: int = 0) -> list[Record]:
    """Load records from all .bin files found recursively under ``directory``.

    If ``limit`` is positive and there are more files, that many are picked at
    random. A missing directory gives an empty list.
    """
    try:
        files = [path for path in _walk(Path(directory)) if _extension(path.name) == ".bin"]
    except FileNotFoundError:
        return []
    except OSError as exc:
        raise WireError(f"cannot walk {directory}: {exc}") from exc

    if limit > 0 and len(files) > limit:
        files = random.sample(files, limit)

    records: list[Record] = []
    for path in files:
        try:
            records.extend(load_record_file(path))
        except (OSError, WireError) as exc:
            raise WireError(f"{path}: {exc}") from exc
    return records