"""Filesystem utility functions."""

import re
from pathlib import Path


def ensure_exists(path: Path, what: str) -> None:
    """
    Check that a path exists, raise FileNotFoundError if not.

    Args:
        path: Path to check
        what: Description of what this path represents (for error message)

    Raises:
        FileNotFoundError: If path does not exist
    """
    if not path.exists():
        raise FileNotFoundError(f"Missing {what} at: {path}")


def read_text(path: Path, encoding: str = "utf-8") -> str:
    """
    Read a text file unchanged, so that line numbers in error messages stay valid.

    Args:
        path: Path to text file
        encoding: File encoding

    Returns:
        File contents
    """
    ensure_exists(path, "text file")
    return path.read_text(encoding=encoding)


def _split_prefix(prefix: str) -> tuple[Path, str]:
    if prefix.endswith(("/", "\\")):
        return Path(prefix), ""
    return Path(prefix).parent, Path(prefix).name


def files_with_prefix(prefix: str) -> list[Path]:
    """
    List files whose path starts with `prefix`.

    The prefix may contain directories; everything after the last "/" is the
    filename prefix.
    """
    directory, name_prefix = _split_prefix(prefix)
    if not directory.is_dir():
        return []
    return sorted(p for p in directory.iterdir() if p.is_file() and p.name.startswith(name_prefix))


def next_numbered_path(prefix: str, padding: int, suffix: str = ".xml") -> Path:
    """
    Next free `<prefix><number><suffix>` path, numbers zero-padded to `padding` digits.

    Raises:
        ValueError: If the next number needs more than `padding` digits
    """
    _, name_prefix = _split_prefix(prefix)
    pattern = re.compile(rf"^{re.escape(name_prefix)}(\d{{{padding}}}){re.escape(suffix)}$")
    numbers = [int(m.group(1)) for p in files_with_prefix(prefix) if (m := pattern.match(p.name))]
    next_number = max(numbers, default=0) + 1
    if len(str(next_number)) > padding:
        raise ValueError(f"Not enough digits ({padding}) for file number {next_number} with prefix {prefix}")
    return Path(f"{prefix}{next_number:0{padding}d}{suffix}")
