"""Reading, writing and validating MongoDB wire protocol messages."""

__version__ = "0.1.0"

__all__ = [
    "check",
    "dump",
    "errors",
    "flags",
    "header",
    "message",
    "op_msg",
    "op_query",
    "op_reply",
    "records",
]