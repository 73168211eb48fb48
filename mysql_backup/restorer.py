"""
Restoring backup scripts for MySQL Backup.
"""

import logging
from pathlib import Path
from typing import Union

from .connection import foreign_key_checks_disabled, quote_identifier, transaction
from .exceptions import RestoreError
from .script import extract_table_names, read_script, split_statements


class DatabaseRestorer:
    """Replays a backup script against the active database."""

    def __init__(self, connection):
        self.connection = connection

    def run(self, script_path: Union[str, Path], drop_tables: bool = True) -> bool:
        """
        Restore the database from a backup script (.sql or .sql.zip).

        Args:
            script_path: Path to the backup script.
            drop_tables: Drop every table the script recreates before replaying it.

        Returns:
            True once every statement has been executed and committed.

        Raises:
            RestoreError: The script could not be read or a statement failed.
                          The transaction is rolled back.
        """
        path = Path(script_path)
        logging.info(f"Restoring from '{path}'")

        try:
            content = read_script(path)
            statements = split_statements(content)

            with foreign_key_checks_disabled(self.connection), transaction(self.connection):
                if drop_tables:
                    self._drop_tables(extract_table_names(content))
                self._execute_statements(statements)
        except Exception as e:
            logging.error(f"Restore failed: {e}")
            raise RestoreError(f"Restore of '{path.name}' failed: {e}") from e

        logging.info(f"Restore complete. {len(statements)} statement(s) executed.")
        return True

    def _drop_tables(self, tables: list[str]) -> None:
        for table in tables:
            logging.debug(f"Dropping table '{table}'")
            self.connection.execute(f"DROP TABLE IF EXISTS {quote_identifier(table)}")

    def _execute_statements(self, statements: list[str]) -> None:
        for index, statement in enumerate(statements, start=1):
            logging.debug(f"Executing statement {index}/{len(statements)}: {statement[:200]}")
            self.connection.execute(statement)
