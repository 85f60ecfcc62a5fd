"""Exceptions raised while reading, writing and validating wire messages."""

from __future__ import annotations


class WireError(Exception):
    """A wire protocol message could not be read, written or validated.

    Errors are chained with ``raise ... from ...``. The innermost cause
    carries the original description of the problem.
    """

    def root_message(self) -> str:
        """Return the message of the innermost exception in the cause chain."""
        err: BaseException = self
        seen = {id(err)}
        while err.__cause__ is not None and id(err.__cause__) not in seen:
            err = err.__cause__
            seen.add(id(err))
        return str(err)


class ZeroReadError(WireError):
    """Zero bytes were read: the peer closed the connection."""

    def __init__(self, message: str = "zero bytes read") -> None:
        super().__init__(message)