"""In-memory league store with JSON persistence.

Stands in for the hosted database: records are kept per table keyed by id,
and the whole store can be saved to and loaded from a single JSON file.
"""

import logging
import uuid
from pathlib import Path
from typing import Any, Optional

from .constants import TABLES
from .errors import NotFoundError
from .schemas import Record, StoreFile
from .utils import load_json, save_json

logger = logging.getLogger('oche.storage')


class LeagueStore:
    """Generic record store offering get, insert, patch, delete, and query."""

    def __init__(self):
        self._tables: dict[str, dict[str, Record]] = {name: {} for name in TABLES}

    def _table(self, table: str) -> dict[str, Record]:
        if table not in self._tables:
            raise NotFoundError(f'Unknown table: {table}')
        return self._tables[table]

    def get(self, table: str, record_id: Optional[str]) -> Optional[Any]:
        """Fetch a record by id, or None if it does not exist."""
        if not record_id:
            return None
        return self._table(table).get(record_id)

    def insert(self, table: str, record: Record) -> Any:
        """
        Insert a record, assigning an id if it has none.

        Returns:
            The stored record (with its id)
        """
        rows = self._table(table)
        if not record.id:
            record = record.model_copy(update={'id': uuid.uuid4().hex})
        rows[record.id] = record
        logger.debug(f'Inserted {table}/{record.id}')
        return record

    def patch(self, table: str, record_id: str, **changes: Any) -> Any:
        """
        Replace selected fields on a stored record.

        Raises:
            NotFoundError: If the record does not exist
        """
        rows = self._table(table)
        current = rows.get(record_id)
        if current is None:
            raise NotFoundError(f'No {table} record with id {record_id}')
        updated = current.model_copy(update=changes)
        rows[record_id] = updated
        logger.debug(f'Patched {table}/{record_id}: {sorted(changes)}')
        return updated

    def delete(self, table: str, record_id: str) -> None:
        """Delete a record; deleting a missing id is a no-op."""
        self._table(table).pop(record_id, None)

    def query(self, table: str, **filters: Any) -> list[Any]:
        """
        Return all records in a table whose fields equal the given filters,
        in insertion order.

        Example:
            store.query('innings', game_id=game.id)
        """
        return [
            record
            for record in self._table(table).values()
            if all(getattr(record, name) == value for name, value in filters.items())
        ]

    def save(self, path: Path | str) -> None:
        """Write every table to a JSON file."""
        data = StoreFile(**{name: list(rows.values()) for name, rows in self._tables.items()})
        save_json(path, data)
        logger.info(f'Saved league store to {path}')

    @classmethod
    def load(cls, path: Path | str) -> 'LeagueStore':
        """Load a store previously written by save()."""
        data = load_json(path, schema=StoreFile)
        store = cls()
        for name in TABLES:
            for record in getattr(data, name):
                store.insert(name, record)
        logger.info(f'Loaded league store from {path}')
        return store
