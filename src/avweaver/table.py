"""Tabular config loader: delimited text tables to ordered records.

Table format:
  slide,audio,duration          # first line names the columns
  intro.png,intro.m4a,12
  outro.png,,5

Cells are split on the delimiter with no quoting or escaping. Rows with
fewer cells than the header get None for the trailing columns; extra
cells are ignored. Files are UTF-8; a leading byte order mark is dropped.
"""

from pathlib import Path

from .errors import ConfigError


def load_table(table_path: str | Path, delimiter: str = ",") -> list[dict]:
    """Load a delimited table into an ordered list of records.

    Args:
        table_path: Path to the table file.
        delimiter: Cell separator.

    Returns:
        One dict per non-empty data line, mapping column name to the
        whitespace-trimmed cell string (None when the row is short).

    Raises:
        ConfigError: Missing/unreadable file, or empty header.
    """
    if table_path is None:
        raise ConfigError("Config file path is missing")

    try:
        text = Path(table_path).read_text(encoding="utf-8-sig")
    except OSError as e:
        raise ConfigError(f"Config file not readable: {table_path} ({e.strerror})") from e
    except UnicodeDecodeError as e:
        raise ConfigError(
            f"Config file not readable: {table_path} (not UTF-8 text at byte {e.start})"
        ) from e

    lines = text.splitlines()
    if not lines or not lines[0].strip():
        raise ConfigError(f"Config file has no header line: {table_path}")

    columns = [c.strip() for c in lines[0].split(delimiter)]
    if any(not c for c in columns):
        raise ConfigError(f"Config file has an empty column name in its header: {table_path}")

    records = []
    for line in lines[1:]:
        if not line.strip():
            continue
        cells = line.split(delimiter)
        record = {}
        for i, column in enumerate(columns):
            record[column] = cells[i].strip() if i < len(cells) else None
        records.append(record)
    return records


def require_columns(records: list[dict], columns: list[str], source: str | Path) -> None:
    """Raise ConfigError if the table lacks any of the given columns.

    Checked against the first record (all records share the header).
    An empty table passes; callers decide whether zero rows is valid.
    """
    if not records:
        return
    missing = [c for c in columns if c not in records[0]]
    if missing:
        raise ConfigError(
            f"Config file {source}: missing required column(s) {missing}. "
            f"Found: {list(records[0])}"
        )


def cell(record: dict, column: str) -> str | None:
    """Return a cell value, treating empty strings as absent."""
    value = record.get(column)
    return value if value else None
