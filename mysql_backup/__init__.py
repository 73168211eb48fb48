"""
MySQL Backup
============
Dump a MySQL database to a replayable SQL script and restore it, without
shelling out to mysqldump:
- Whole-database or selected-table backups
- Structure-only mode
- Zip archiving
- Transactional, all-or-nothing restore
"""

from .backup import MySQLBackup
from .config import ConfigLoader
from .connection import DatabaseConnection, foreign_key_checks_disabled, transaction
from .database_dumper import DatabaseDumper
from .exceptions import (
    ArchiveUnavailableError,
    BackupError,
    BackupFolderError,
    MySQLBackupError,
    RestoreError,
    SetupError,
)
from .main import main
from .models import (
    AllTables,
    BackupResult,
    BackupSettings,
    ExplicitTables,
    TableSelection,
    TableStats,
)
from .restorer import DatabaseRestorer
from .script import extract_table_names, split_statements
from .table_dumper import TableDumper
from .utils import setup_logging

__version__ = "1.0.0"

__all__ = [
    # Main entry point
    "main",
    # Core classes
    "MySQLBackup",
    "ConfigLoader",
    "DatabaseConnection",
    "DatabaseDumper",
    "DatabaseRestorer",
    "TableDumper",
    # Scoped helpers
    "foreign_key_checks_disabled",
    "transaction",
    # Models
    "AllTables",
    "BackupResult",
    "BackupSettings",
    "ExplicitTables",
    "TableSelection",
    "TableStats",
    # Exceptions
    "ArchiveUnavailableError",
    "BackupError",
    "BackupFolderError",
    "MySQLBackupError",
    "RestoreError",
    "SetupError",
    # Script format
    "extract_table_names",
    "split_statements",
    # Utilities
    "setup_logging",
]
