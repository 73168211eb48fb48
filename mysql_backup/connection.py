"""
Database connection management for MySQL Backup.

The backup and restore engines only rely on the methods of
DatabaseConnection, so any object offering the same methods can stand in
for it.
"""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import mysql.connector
from mysql.connector import Error as MySQLError


class DatabaseConnection:
    """Manages MySQL database connections with context manager support."""

    DEFAULT_PORT = 3306
    DEFAULT_CHARSET = 'utf8mb4'

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        database: Optional[str] = None
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.database = database
        self.connection = None

    def __enter__(self) -> "DatabaseConnection":
        """Context manager entry - establish connection."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - close connection."""
        self.disconnect()

    def connect(self) -> None:
        """Establish database connection."""
        try:
            self.connection = mysql.connector.connect(
                host=self.host,
                port=self.port,
                user=self.user,
                password=self.password,
                database=self.database,
                charset=self.DEFAULT_CHARSET,
                use_unicode=True,
                autocommit=False
            )
            logging.info(f"Connected to {self.host}:{self.port}/{self.database or 'N/A'}")
        except MySQLError as e:
            logging.error(f"Failed to connect to database: {e}")
            raise

    def disconnect(self) -> None:
        """Close database connection."""
        if self.connection and self.connection.is_connected():
            self.connection.close()
            logging.debug("Database connection closed")

    def execute(self, statement: str) -> None:
        """Execute a statement that returns no rows."""
        cursor = self.connection.cursor()
        try:
            cursor.execute(statement)
        finally:
            cursor.close()

    def execute_query(self, query: str, params: Optional[tuple] = None) -> list[tuple]:
        """Execute a query and return results."""
        cursor = self.connection.cursor()
        try:
            cursor.execute(query, params)
            return cursor.fetchall()
        finally:
            cursor.close()

    def query(self, query: str) -> list[dict[str, Any]]:
        """Execute a query and return rows as column -> value mappings.

        Keys keep the column order of the result set.
        """
        cursor = self.connection.cursor(dictionary=True)
        try:
            cursor.execute(query)
            return cursor.fetchall()
        finally:
            cursor.close()

    def begin(self, consistent_snapshot: bool = False) -> None:
        """Start a transaction."""
        self.connection.start_transaction(consistent_snapshot=consistent_snapshot)

    def commit(self) -> None:
        self.connection.commit()

    def rollback(self) -> None:
        self.connection.rollback()

    def get_database_name(self) -> str:
        """Get the name of the active database."""
        results = self.execute_query("SELECT DATABASE()")
        return results[0][0]

    def get_server_version(self) -> Optional[str]:
        """Get the server version string, if the driver reports one."""
        return self.connection.get_server_info()

    def get_tables(self) -> list[str]:
        """Get the base tables of the current database; views are skipped."""
        results = self.execute_query("SHOW FULL TABLES WHERE Table_type = 'BASE TABLE'")
        return [row[0] for row in results]

    def get_create_table(self, table: str) -> str:
        """Get CREATE TABLE statement."""
        results = self.execute_query(f"SHOW CREATE TABLE {quote_identifier(table)}")
        return results[0][1]

    def get_row_count(self, table: str) -> int:
        """Get row count for a table."""
        results = self.execute_query(f"SELECT COUNT(*) FROM {quote_identifier(table)}")
        return results[0][0]


def quote_identifier(name: str) -> str:
    """Quote a MySQL identifier with backticks."""
    return '`' + name.replace('`', '``') + '`'


@contextmanager
def foreign_key_checks_disabled(connection) -> Iterator[Any]:
    """Suspend foreign key checks for the session, restoring them on exit."""
    connection.execute("SET foreign_key_checks = 0")
    logging.debug("Foreign key checks disabled")
    try:
        yield connection
    finally:
        connection.execute("SET foreign_key_checks = 1")
        logging.debug("Foreign key checks restored")


@contextmanager
def transaction(connection, consistent_snapshot: bool = False) -> Iterator[Any]:
    """Run the enclosed block in one transaction.

    Commits on normal exit; rolls back and re-raises on any exception.
    """
    connection.begin(consistent_snapshot=consistent_snapshot)
    try:
        yield connection
    except Exception:
        logging.debug("Rolling back transaction")
        connection.rollback()
        raise
    connection.commit()
