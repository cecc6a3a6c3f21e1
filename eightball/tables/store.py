"""
Table Store — owns the live session of every table.

Updated by: the API after each accepted transition or shot
Queried by: the API's read endpoints

A table holds exactly one session at a time; each accepted call replaces
it with the session the engine returned. Callers that read a session, rule
on it and write the result back do so inside `hold`, so calls on one table
are applied one at a time.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional
from uuid import uuid4

from eightball.models.session import Session


class TableStore:
    """
    In-memory table store.
    Sessions are not persisted; finished games go to the history store.
    """

    def __init__(self):
        self._tables: Dict[str, Session] = {}
        self._table_locks: Dict[str, threading.Lock] = {}
        self._lock = threading.Lock()  # Guards both dicts

    def open_table(self, session: Session) -> str:
        """Register a new table and return its id."""
        table_id = f"table_{uuid4().hex[:12]}"
        with self._lock:
            self._tables[table_id] = session
            self._table_locks[table_id] = threading.Lock()
        return table_id

    def get(self, table_id: str) -> Optional[Session]:
        with self._lock:
            return self._tables.get(table_id)

    @contextmanager
    def hold(self, table_id: str) -> Iterator[Optional[Session]]:
        """
        Exclusive access to one table.

        Yields the table's session, or None if there is no such table.
        Other `hold` and `close_table` calls on the same table wait until
        the block exits.
        """
        with self._lock:
            table_lock = self._table_locks.get(table_id)
        if table_lock is None:
            yield None
            return
        with table_lock:
            yield self.get(table_id)

    def replace(self, table_id: str, session: Session) -> None:
        """Swap in the session returned by the engine."""
        with self._lock:
            if table_id not in self._tables:
                raise KeyError(table_id)
            self._tables[table_id] = session

    def close_table(self, table_id: str) -> bool:
        with self._lock:
            table_lock = self._table_locks.get(table_id)
        if table_lock is None:
            return False
        with table_lock:
            with self._lock:
                if self._table_locks.get(table_id) is not table_lock:
                    return False
                del self._tables[table_id]
                del self._table_locks[table_id]
        return True

    def table_ids(self) -> List[str]:
        with self._lock:
            return list(self._tables)
