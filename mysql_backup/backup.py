"""
Library entry point for MySQL Backup.
"""

from pathlib import Path
from typing import Any, Optional, Union

from .database_dumper import DatabaseDumper
from .models import BackupResult
from .restorer import DatabaseRestorer
from .utils import check_archive_support, ensure_backup_folder


class MySQLBackup:
    """
    Back up and restore a MySQL database through a borrowed connection.

    The connection is owned by the caller; it must stay open for the
    duration of each backup() or restore() call.
    """

    def __init__(
        self,
        connection,
        backup_folder: Union[str, Path] = 'backup',
        consistent_snapshot: bool = True,
        batch_size: Optional[int] = None
    ):
        self.connection = connection
        self.backup_folder = ensure_backup_folder(backup_folder)
        check_archive_support()

        self.dumper = DatabaseDumper(
            connection,
            self.backup_folder,
            consistent_snapshot=consistent_snapshot,
            batch_size=batch_size
        )
        self.restorer = DatabaseRestorer(connection)

    def backup(
        self,
        tables: Any = None,
        include_data: bool = True,
        archive: bool = False
    ) -> BackupResult:
        """Back up the given tables (all when None) into the backup folder."""
        return self.dumper.run(tables=tables, include_data=include_data, archive=archive)

    def restore(self, script_path: Union[str, Path], drop_tables: bool = True) -> bool:
        """Restore the database from a backup script."""
        return self.restorer.run(script_path, drop_tables=drop_tables)
