"""
Main database dumping orchestration for MySQL Backup.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Union

from .connection import foreign_key_checks_disabled, transaction
from .exceptions import BackupError
from .models import AllTables, BackupResult, ExplicitTables, TableSelection
from .script import FOOTER, FOREIGN_KEY_CHECKS_OFF, format_header
from .table_dumper import TableDumper
from .utils import archive_backup_file, generate_backup_file_name, open_backup_file


class DatabaseDumper:
    """Writes one backup script for a set of tables of the active database."""

    def __init__(
        self,
        connection,
        backup_folder: Union[str, Path],
        consistent_snapshot: bool = True,
        batch_size: Optional[int] = None
    ):
        self.connection = connection
        self.backup_folder = Path(backup_folder)
        self.consistent_snapshot = consistent_snapshot
        self.table_dumper = TableDumper(connection, batch_size=batch_size)

    def run(
        self,
        tables: Any = None,
        include_data: bool = True,
        archive: bool = False
    ) -> BackupResult:
        """Run the backup.

        Args:
            tables: None for every table, a table name, a list of names,
                    or a table selection.
            include_data: If False, only table structures are written.
            archive: If True, the script is zipped and the .sql removed.

        Raises:
            ValueError: The table selection is invalid.
            BackupError: Any file, database or archive failure.
        """
        selection = TableSelection.from_value(tables)

        try:
            with foreign_key_checks_disabled(self.connection), \
                    transaction(self.connection, consistent_snapshot=self.consistent_snapshot):
                result = self._dump(selection, include_data, archive)
        except Exception as e:
            logging.error(f"Backup failed: {e}")
            raise BackupError(f"Backup failed: {e}") from e

        logging.info(
            f"Backup written to '{result.file_name}' "
            f"({result.file_size} bytes, {len(result.tables)} table(s), {result.total_rows} rows)"
        )
        return result

    def _dump(
        self,
        selection: Union[AllTables, ExplicitTables],
        include_data: bool,
        archive: bool
    ) -> BackupResult:
        database = self.connection.get_database_name()
        table_names = self._get_tables_to_dump(selection)
        logging.info(f"Backing up {len(table_names)} table(s) from '{database}'")

        now = datetime.now()
        file_name = generate_backup_file_name(database, selection, now)
        backup_path, file_handle = open_backup_file(self.backup_folder, file_name)

        table_stats = []
        with file_handle:
            file_handle.write(format_header(
                now, database, table_names, self.connection.get_server_version()
            ))
            file_handle.write(FOREIGN_KEY_CHECKS_OFF)

            for table in table_names:
                stats = self.table_dumper.dump_table(table, file_handle, include_data)
                table_stats.append(stats)
                self._log_table_result(stats, include_data)

            file_handle.write(FOOTER)

        if archive:
            backup_path = archive_backup_file(backup_path)

        return BackupResult(
            file_name=backup_path.name,
            file_size=backup_path.stat().st_size,
            path=str(backup_path),
            tables=table_stats
        )

    def _get_tables_to_dump(self, selection: Union[AllTables, ExplicitTables]) -> list[str]:
        """Resolve the selection into table names, in catalog or caller order."""
        if isinstance(selection, ExplicitTables):
            return list(selection.names)
        return self.connection.get_tables()

    def _log_table_result(self, stats, include_data: bool) -> None:
        if not include_data:
            logging.info(f"  ✓ {stats.table}: structure")
        elif stats.has_data:
            logging.info(f"  ✓ {stats.table}: {stats.rows_dumped} rows")
        else:
            logging.info(f"  ✓ {stats.table}: empty")
