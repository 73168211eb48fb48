"""
Backup script format for MySQL Backup.
======================================
A backup script is plain UTF-8 SQL:

- a comment header (generation time, server version, database, and a
  JSON manifest of the dumped tables)
- the foreign key pragma
- per table a structure block and, optionally, a data block
- an end-of-dump comment

Restoring relies on extract_table_names() to find the tables to drop and
on split_statements() to cut the script into executable statements.
"""

import json
import re
import zipfile
from datetime import date, datetime, time, timedelta
from pathlib import Path
from typing import Any, Optional, Sequence

from .connection import quote_identifier

FOREIGN_KEY_CHECKS_OFF = "SET foreign_key_checks=0;\n\n"
FOOTER = "-- End of database backup process\n"

MANIFEST_PREFIX = "-- Tables: "
MANIFEST_PATTERN = re.compile(r'^-- Tables: (\[.*\])[ \t]*$', re.MULTILINE)
STRUCTURE_MARKER_PATTERN = re.compile(
    r'^-- Table structure for table `((?:[^`]|``)+)`',
    re.MULTILINE | re.IGNORECASE
)

_ESCAPES = str.maketrans({
    '\\': '\\\\',
    "'": "\\'",
    '"': '\\"',
    '\0': '\\0',
    '\n': '\\n',
    '\r': '\\r',
    '\x1a': '\\Z',
})

_TOKEN_PATTERN = re.compile(
    r"""
    (?P<string>
        '(?:[^'\\]|\\.?)*(?:'|\Z)
      | "(?:[^"\\]|\\.?)*(?:"|\Z)
      | `[^`]*(?:`|\Z)
    )
    | (?P<line_comment>(?:\#|--(?=\s|\Z))[^\n]*)
    | (?P<block_comment>/\*.*?(?:\*/|\Z))
    | (?P<terminator>;)
    | (?P<other>[^'"`\#;/-]+|.)
    """,
    re.VERBOSE | re.DOTALL
)


def _format_timedelta(value: timedelta) -> str:
    # TIME columns come back as timedelta and may exceed 24 hours
    seconds = int(value.total_seconds())
    sign = '-' if seconds < 0 else ''
    hours, remainder = divmod(abs(seconds), 3600)
    minutes, seconds = divmod(remainder, 60)
    text = f"{sign}{hours:02d}:{minutes:02d}:{seconds:02d}"
    if value.microseconds:
        text += f".{abs(value).microseconds:06d}"
    return text


_VALUE_FORMATTERS = {
    type(None): lambda v: '',
    bool: lambda v: '1' if v else '0',
    datetime: lambda v: v.isoformat(sep=' '),
    date: lambda v: v.isoformat(),
    time: lambda v: v.isoformat(),
    timedelta: _format_timedelta,
    set: lambda v: ','.join(sorted(v)),
}


def escape_string(text: str) -> str:
    """Escape text for embedding in a single-quoted MySQL string literal."""
    return text.translate(_ESCAPES)


def value_to_text(value: Any) -> str:
    """Convert a column value to its string representation."""
    formatter = _VALUE_FORMATTERS.get(type(value))
    if formatter:
        return formatter(value)
    return str(value)


def format_value(value: Any) -> str:
    """Format a value as a quoted string literal.

    Every value is quoted, numbers and NULLs included, so the restored
    column receives the string form and the server coerces it. Binary
    values are written as hex literals so every byte survives.
    """
    if isinstance(value, (bytes, bytearray)):
        return f"X'{bytes(value).hex()}'"
    return f"'{escape_string(value_to_text(value))}'"


def format_insert(table: str, columns: Sequence[str], rows: Sequence[Sequence[Any]]) -> str:
    """Build one multi-row INSERT statement."""
    quoted_columns = ', '.join(quote_identifier(col) for col in columns)
    value_lines = [
        f"({', '.join(format_value(val) for val in row)})"
        for row in rows
    ]
    return (
        f"INSERT INTO {quote_identifier(table)} ({quoted_columns}) VALUES\n"
        + ',\n'.join(value_lines)
        + ";\n\n"
    )


def format_header(
    generated_at: datetime,
    database: str,
    tables: Sequence[str],
    server_version: Optional[str] = None
) -> str:
    """Build the comment header, including the table manifest."""
    lines = [f"-- Generated on: {generated_at.strftime('%Y-%m-%d %H:%M:%S')}"]
    if server_version:
        lines.append(f"-- Server version: {server_version}")
    lines.append(f"-- Database: {quote_identifier(database)}")
    lines.append(MANIFEST_PREFIX + json.dumps(list(tables), ensure_ascii=False))
    return '\n'.join(lines) + "\n\n"


def _block_comment(text: str) -> str:
    return f"--\n-- {text}\n--\n\n"


def structure_marker(table: str) -> str:
    return _block_comment(f"Table structure for table {quote_identifier(table)}")


def data_marker(table: str) -> str:
    return _block_comment(f"Dumping data for table {quote_identifier(table)}")


def empty_marker(table: str) -> str:
    return _block_comment(f"No data found for table {quote_identifier(table)}")


def extract_table_names(text: str) -> list[str]:
    """
    Find the tables a script recreates, in order of first appearance.

    The manifest header line is used when present. Scripts without one
    are scanned for structure-block markers instead.
    """
    manifest = MANIFEST_PATTERN.search(text)
    if manifest:
        names = json.loads(manifest.group(1))
    else:
        names = [
            match.replace('``', '`')
            for match in STRUCTURE_MARKER_PATTERN.findall(text)
        ]
    return list(dict.fromkeys(names))


def split_statements(text: str) -> list[str]:
    """
    Split a script into statements on `;` terminators.

    Semicolons inside quoted strings, quoted identifiers and comments do
    not end a statement. Line comments are dropped; block comments are
    kept since MySQL executes /*! ... */ sections. Blank statements are
    skipped.
    """
    statements: list[str] = []
    current: list[str] = []

    for match in _TOKEN_PATTERN.finditer(text):
        kind = match.lastgroup
        if kind == 'line_comment':
            continue
        if kind == 'terminator':
            _append_statement(statements, current)
            current = []
            continue
        current.append(match.group())

    _append_statement(statements, current)
    return statements


def _append_statement(statements: list[str], parts: list[str]) -> None:
    statement = ''.join(parts).strip()
    if statement:
        statements.append(statement)


def read_script(path: Path) -> str:
    """Read a backup script, unpacking it first if it has a .zip suffix."""
    path = Path(path)
    if path.suffix.lower() == '.zip':
        with zipfile.ZipFile(path) as archive:
            scripts = [name for name in archive.namelist() if name.endswith('.sql')]
            if len(scripts) != 1:
                raise ValueError(
                    f"Archive '{path.name}' must contain exactly one .sql script, "
                    f"found {len(scripts)}"
                )
            return archive.read(scripts[0]).decode('utf-8')
    return path.read_text(encoding='utf-8')
