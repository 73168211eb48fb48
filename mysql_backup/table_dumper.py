"""
Table dumping functionality for MySQL Backup.
"""

import logging
import re
from typing import Optional, TextIO

from .connection import quote_identifier
from .models import TableStats
from .script import data_marker, empty_marker, format_insert, structure_marker

# SHOW CREATE TABLE on a view returns CREATE [ALGORITHM=..] [DEFINER=..] [SQL SECURITY ..] VIEW
VIEW_PATTERN = re.compile(r'\s*CREATE\s+(?:ALGORITHM\s*=\s*\w+\s+)?(?:DEFINER\s*=\s*\S+\s+)?'
                          r'(?:SQL\s+SECURITY\s+\w+\s+)?VIEW\b', re.IGNORECASE)


class TableDumper:
    """Writes the structure and data blocks of individual tables."""

    def __init__(self, connection, batch_size: Optional[int] = None):
        self.connection = connection
        self.batch_size = batch_size

    def dump_table(self, table: str, file_handle: TextIO, include_data: bool = True) -> TableStats:
        """
        Dump a table into an open backup script.

        Args:
            table: Name of the table to dump.
            file_handle: Open text handle of the backup script.
            include_data: If False, only the CREATE statement is written.

        Returns:
            TableStats with dump statistics.
        """
        stats = TableStats(table=table)

        self._dump_structure(table, file_handle)
        if include_data:
            stats.rows_dumped = self._dump_data(table, file_handle)
            stats.has_data = stats.rows_dumped > 0

        return stats

    def _dump_structure(self, table: str, file_handle: TextIO) -> None:
        create_statement = self.connection.get_create_table(table)
        if VIEW_PATTERN.match(create_statement):
            raise ValueError(f"'{table}' is a view, only base tables can be backed up")
        file_handle.write(structure_marker(table))
        file_handle.write(f"{create_statement};\n\n")

    def _dump_data(self, table: str, file_handle: TextIO) -> int:
        """Write the table rows as INSERT statements and return the row count."""
        rows = self.connection.query(f"SELECT * FROM {quote_identifier(table)}")

        if not rows:
            logging.debug(f"Table '{table}' is empty")
            file_handle.write(empty_marker(table))
            return 0

        # Column order follows the first row
        columns = list(rows[0].keys())
        values = [[row[col] for col in columns] for row in rows]

        file_handle.write(data_marker(table))
        for batch in self._batches(values):
            file_handle.write(format_insert(table, columns, batch))

        return len(rows)

    def _batches(self, values: list[list]) -> list[list[list]]:
        if not self.batch_size or self.batch_size <= 0:
            return [values]
        return [
            values[start:start + self.batch_size]
            for start in range(0, len(values), self.batch_size)
        ]
