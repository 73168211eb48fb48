#!/usr/bin/env python3
"""
MySQL Backup - CLI Entry Point
==============================
Back up a MySQL database to a replayable SQL script, or restore one:

    mysql-backup -c config.yaml backup [-t users orders] [--no-data] [--archive]
    mysql-backup -c config.yaml restore backup/backup_shop-2024-01-15_103045.sql
"""

import argparse
import logging
import sys
from typing import Optional

import yaml

from .backup import MySQLBackup
from .config import ConfigLoader
from .connection import DatabaseConnection
from .models import BackupSettings, ExplicitTables
from .utils import print_dry_run_info, setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='MySQL Backup - Dump and restore MySQL databases as SQL scripts'
    )
    parser.add_argument(
        '-c', '--config',
        default='config.yaml',
        help='Path to configuration file (default: config.yaml)'
    )
    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )

    subparsers = parser.add_subparsers(dest='command', required=True)

    backup_parser = subparsers.add_parser('backup', help='Write a backup script')
    backup_parser.add_argument(
        '-t', '--tables',
        nargs='+',
        help='Back up only these tables (default: all tables)'
    )
    backup_parser.add_argument(
        '--no-data',
        action='store_true',
        help='Write table structures only'
    )
    backup_parser.add_argument(
        '--archive',
        action='store_true',
        help='Compress the script into a zip archive'
    )
    backup_parser.add_argument(
        '--dry-run',
        action='store_true',
        help='Show what would be backed up without writing anything'
    )

    restore_parser = subparsers.add_parser('restore', help='Replay a backup script')
    restore_parser.add_argument('script', help='Path to a .sql or .sql.zip backup')
    restore_parser.add_argument(
        '--keep-tables',
        action='store_true',
        help='Do not drop existing tables before restoring'
    )

    return parser


def run_backup(conn: DatabaseConnection, config: ConfigLoader, args: argparse.Namespace) -> None:
    """Run (or dry-run) a backup with config settings overridden by CLI flags."""
    backup_config = config.get_backup_settings()
    settings = BackupSettings.from_configs(backup_config, {
        'tables': args.tables,
        'include_data': False if args.no_data else None,
        'archive': True if args.archive else None,
    })

    if args.dry_run:
        logging.info("DRY RUN MODE - Nothing will be written")
        selection = settings.selection
        if isinstance(selection, ExplicitTables):
            tables = list(selection.names)
        else:
            tables = conn.get_tables()
        table_counts = [
            (table, conn.get_row_count(table) if settings.include_data else 0)
            for table in tables
        ]
        print_dry_run_info(conn.get_database_name(), table_counts, settings)
        return

    backup = MySQLBackup(
        conn,
        backup_config.get('folder', 'backup'),
        consistent_snapshot=settings.consistent_snapshot,
        batch_size=settings.batch_size
    )
    result = backup.backup(
        tables=settings.tables,
        include_data=settings.include_data,
        archive=settings.archive
    )

    logging.info("=" * 50)
    logging.info("BACKUP COMPLETE")
    logging.info(f"File: {result.path}")
    logging.info(f"Size: {result.file_size} bytes")
    logging.info(f"Tables: {len(result.tables)}")
    logging.info(f"Total Rows: {result.total_rows}")


def run_restore(conn: DatabaseConnection, config: ConfigLoader, args: argparse.Namespace) -> None:
    restore_config = config.get_restore_settings()
    drop_tables = restore_config.get('drop_tables', True) and not args.keep_tables

    backup = MySQLBackup(conn, config.get_backup_settings().get('folder', 'backup'))
    backup.restore(args.script, drop_tables=drop_tables)

    logging.info("=" * 50)
    logging.info("RESTORE COMPLETE")


def main(argv: Optional[list[str]] = None):
    """Main entry point."""
    args = build_parser().parse_args(argv)

    # Load configuration
    try:
        config = ConfigLoader(args.config)
    except FileNotFoundError:
        print(f"Error: Configuration file '{args.config}' not found")
        sys.exit(1)
    except yaml.YAMLError as e:
        print(f"Error: Invalid YAML in configuration file: {e}")
        sys.exit(1)

    # Setup logging
    log_settings = config.get_logging_settings()
    if args.verbose:
        log_settings['level'] = 'DEBUG'
    setup_logging(log_settings)

    try:
        conn_settings = config.get_connection_settings()
        with DatabaseConnection(
            host=conn_settings['host'],
            port=conn_settings.get('port', DatabaseConnection.DEFAULT_PORT),
            user=conn_settings['user'],
            password=conn_settings.get('password', ''),
            database=conn_settings['database']
        ) as conn:
            if args.command == 'backup':
                run_backup(conn, config, args)
            else:
                run_restore(conn, config, args)
    except Exception as e:
        logging.error(f"Fatal error: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
