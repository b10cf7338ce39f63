"""I/O utilities: filesystem operations and dataset loading."""

from infrastructure.io.datasets import iter_csv_chunks, read_table
from infrastructure.io.fs import ensure_exists, files_with_prefix, next_numbered_path, read_text

__all__ = [
    "ensure_exists",
    "read_text",
    "files_with_prefix",
    "next_numbered_path",
    "read_table",
    "iter_csv_chunks",
]
