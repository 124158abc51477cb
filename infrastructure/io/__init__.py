"""I/O utilities: filesystem operations."""

from infrastructure.io.fs import ensure_exists, read_json, read_text, write_json_atomic

__all__ = [
    "ensure_exists",
    "read_text",
    "read_json",
    "write_json_atomic",
]
