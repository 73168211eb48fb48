"""
Utility functions for MySQL Backup.
"""

import logging
import os
import sys
import zipfile
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, TextIO, Union

from .exceptions import ArchiveUnavailableError, BackupFolderError
from .models import AllTables, BackupSettings, ExplicitTables

FOLDER_MODE = 0o755
SCRIPT_SUFFIX = '.sql'
ARCHIVE_SUFFIX = '.zip'


def setup_logging(log_settings: dict[str, Any]) -> None:
    """Setup logging configuration."""
    log_level = getattr(logging, log_settings.get('level', 'INFO').upper())
    log_file = log_settings.get('file')

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=handlers,
        force=True
    )


def ensure_backup_folder(folder: Union[str, Path]) -> Path:
    """
    Make sure the backup folder exists and is writable.

    Creates it when missing and tries to fix its permissions when it is
    not writable. The folder is never removed.
    """
    path = Path(folder)
    try:
        path.mkdir(mode=FOLDER_MODE, parents=True, exist_ok=True)
    except OSError as e:
        raise BackupFolderError(f"Failed to create backup folder '{path}': {e}") from e

    if not os.access(path, os.W_OK):
        try:
            path.chmod(FOLDER_MODE)
        except OSError as e:
            raise BackupFolderError(
                f"Failed to set write permissions for backup folder '{path}': {e}"
            ) from e
        if not os.access(path, os.W_OK):
            raise BackupFolderError(f"Backup folder '{path}' is not writable")

    return path


def check_archive_support() -> None:
    """Fail when zip archives cannot be compressed by this interpreter."""
    if getattr(zipfile, 'zlib', None) is None:
        raise ArchiveUnavailableError(
            "zlib module not found; zip archiving is unavailable in this Python build"
        )


def generate_backup_file_name(
    database: str,
    selection: Union[AllTables, ExplicitTables],
    now: Optional[datetime] = None
) -> str:
    """Build backup_<database>[-<t1>_<t2>...]-<timestamp>.sql."""
    now = now or datetime.now()
    name = f"backup_{database}"
    if isinstance(selection, ExplicitTables):
        name += '-' + '_'.join(selection.names)
    return f"{name}-{now.strftime('%Y-%m-%d_%H%M%S')}{SCRIPT_SUFFIX}"


def open_backup_file(folder: Path, file_name: str) -> tuple[Path, TextIO]:
    """
    Create the backup file without overwriting an existing one.

    When the name (or its archived sibling) is taken, a counter is
    appended before the extension: name-1.sql, name-2.sql, ...
    """
    base = Path(file_name)
    counter = 0
    while True:
        if counter:
            candidate = folder / f"{base.stem}-{counter}{base.suffix}"
        else:
            candidate = folder / base.name

        if not Path(str(candidate) + ARCHIVE_SUFFIX).exists():
            try:
                return candidate, open(candidate, 'x', encoding='utf-8')
            except FileExistsError:
                pass

        counter += 1


def archive_backup_file(script_path: Path) -> Path:
    """Zip a backup script and remove the uncompressed file."""
    zip_path = Path(str(script_path) + ARCHIVE_SUFFIX)
    with zipfile.ZipFile(zip_path, 'w', compression=zipfile.ZIP_DEFLATED) as archive:
        archive.write(script_path, arcname=script_path.name)
    script_path.unlink()
    logging.debug(f"Archived '{script_path.name}' into '{zip_path.name}'")
    return zip_path


def format_settings_display(settings: BackupSettings) -> list[str]:
    """Format backup settings for display in dry-run mode."""
    parts = []
    if not settings.include_data:
        parts.append("structure only")
    if settings.archive:
        parts.append("archive=zip")
    if settings.batch_size:
        parts.append(f"batch_size={settings.batch_size}")
    if not settings.consistent_snapshot:
        parts.append("no consistent snapshot")
    return parts


def print_dry_run_info(
    database: str,
    table_counts: list[tuple[str, int]],
    settings: BackupSettings
) -> None:
    """Log what would be backed up in dry-run mode."""
    logging.info(f"Would back up database: {database}")

    settings_parts = format_settings_display(settings)
    if settings_parts:
        logging.info(f"  Options: {', '.join(settings_parts)}")

    if isinstance(settings.selection, AllTables):
        logging.info(f"  All tables ({len(table_counts)})")

    for table, row_count in table_counts:
        if settings.include_data:
            logging.info(f"  - {table} ({row_count} rows)")
        else:
            logging.info(f"  - {table}")
