"""Global switches and the deep NaN check of message documents."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass

import bson
from bson.errors import InvalidBSON

from mongowire.errors import WireError


@dataclass
class _Settings:
    """Process-wide switches for encoding and decoding."""

    debug: bool = False
    """Perform additional slow validity checks while encoding and decoding."""

    check_nans: bool = False
    """Reject messages that contain float NaN values."""


settings = _Settings()


def _walk(value: object) -> None:
    if isinstance(value, Mapping):
        for item in value.values():
            _walk(item)
    elif isinstance(value, (list, tuple)):
        for item in value:
            _walk(item)
    elif isinstance(value, float) and math.isnan(value):
        raise WireError("NaN is not supported")


def check_nan(value: object) -> None:
    """Raise WireError if a float NaN appears anywhere in ``value``.

    ``value`` may be a document (any mapping), an array (list or tuple),
    a float, or an encoded BSON document given as bytes.
    """
    if isinstance(value, (bytes, bytearray, memoryview)):
        try:
            value = bson.decode(bytes(value))
        except InvalidBSON as exc:
            raise WireError(f"cannot decode document: {exc}") from exc
    _walk(value)