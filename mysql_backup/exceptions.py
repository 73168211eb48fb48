"""
Exception hierarchy for MySQL Backup.
"""


class MySQLBackupError(Exception):
    """Base class for all backup and restore errors."""


class SetupError(MySQLBackupError):
    """Raised when the backup environment cannot be prepared."""


class BackupFolderError(SetupError):
    """Backup folder could not be created or made writable."""


class ArchiveUnavailableError(SetupError):
    """Zip archiving is not supported by this interpreter."""


class BackupError(MySQLBackupError):
    """A backup run failed; the underlying cause is chained."""


class RestoreError(MySQLBackupError):
    """A restore run failed; the underlying cause is chained."""
