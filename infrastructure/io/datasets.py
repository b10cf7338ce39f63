"""Dataset loading utilities."""

from collections.abc import Iterator
from pathlib import Path

import pandas as pd


def read_table(path: Path) -> pd.DataFrame:
    """
    Read tabular data file (Excel or CSV) based on file extension.

    All cells are read as strings; missing cells become empty strings.

    Supported formats:
    - Excel: .xlsx, .xls
    - CSV: .csv

    Args:
        path: Path to data file

    Returns:
        pandas DataFrame

    Raises:
        ValueError: If file format is not supported
        FileNotFoundError: If file does not exist
    """
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    suffix = path.suffix.lower()

    if suffix in [".xlsx", ".xls"]:
        df = pd.read_excel(path, dtype=str)
    elif suffix == ".csv":
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
    else:
        raise ValueError(f"Unsupported file format: {suffix}. Supported formats: .xlsx, .xls, .csv")
    return df.fillna("")


def iter_csv_chunks(
    path: Path,
    *,
    usecols: list[str],
    sep: str = ",",
    chunksize: int = 10_000,
    encoding: str = "utf-8",
) -> Iterator[pd.DataFrame]:
    """
    Stream a large CSV file in chunks, every cell as a string.

    Empty cells stay empty strings, and product codes such as "NA" or "0000"
    are kept as text.

    Raises:
        FileNotFoundError: If file does not exist
        ValueError: If one of `usecols` is not in the header
    """
    if not path.exists():
        raise FileNotFoundError(f"Data file not found: {path}")

    reader = pd.read_csv(
        path,
        sep=sep,
        usecols=usecols,
        dtype=str,
        keep_default_na=False,
        chunksize=chunksize,
        encoding=encoding,
        on_bad_lines="warn",
    )
    with reader:
        yield from reader
