"""
Data models for MySQL Backup.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Optional, Union


@dataclass(frozen=True)
class AllTables:
    """Every table reported by the database catalog."""

    @property
    def names(self) -> tuple[str, ...]:
        return ()


@dataclass(frozen=True)
class ExplicitTables:
    """An ordered, de-duplicated list of table names chosen by the caller."""
    names: tuple[str, ...]

    def __post_init__(self):
        for name in self.names:
            if not isinstance(name, str) or not name.strip():
                raise ValueError(f"Invalid table name: {name!r}")
        names = tuple(dict.fromkeys(self.names))
        if not names:
            raise ValueError("At least one table name is required")
        object.__setattr__(self, 'names', names)


class TableSelection:
    """Factory for the table selection variants."""

    ALL = '*'

    @staticmethod
    def from_value(value: Any) -> Union[AllTables, ExplicitTables]:
        """
        Build a selection from a loosely typed value.

        Accepts None or '*' (all tables), a single table name,
        or an iterable of table names.
        """
        if isinstance(value, (AllTables, ExplicitTables)):
            return value
        if value is None or value == TableSelection.ALL:
            return AllTables()
        if isinstance(value, str):
            return ExplicitTables((value,))
        if isinstance(value, Iterable):
            return ExplicitTables(tuple(value))
        raise ValueError(f"Unsupported table selection: {value!r}")


@dataclass
class TableStats:
    """Statistics for a single table dump."""
    table: str
    rows_dumped: int = 0
    has_data: bool = False


@dataclass
class BackupResult:
    """Descriptor returned by a successful backup."""
    file_name: str
    file_size: int
    path: str
    tables: list[TableStats] = field(default_factory=list)

    @property
    def total_rows(self) -> int:
        return sum(t.rows_dumped for t in self.tables)


@dataclass
class BackupSettings:
    """Merged settings for a backup run."""
    tables: Any = None
    include_data: bool = True
    archive: bool = False
    consistent_snapshot: bool = True
    batch_size: Optional[int] = None

    @classmethod
    def from_configs(cls, *configs: dict[str, Any]) -> "BackupSettings":
        """
        Create BackupSettings by merging configs; later configs win.

        Keys set to None in a later config do not override earlier values.
        """
        settings = {}
        for config in configs:
            for key in ['tables', 'include_data', 'archive', 'consistent_snapshot', 'batch_size']:
                if config.get(key) is not None:
                    settings[key] = config[key]
        return cls(**settings)

    @property
    def selection(self) -> Union[AllTables, ExplicitTables]:
        return TableSelection.from_value(self.tables)
