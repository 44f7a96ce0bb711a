"""
Load store - the document store contract the services write through.

Every write is a compare-and-set on the load's ``version``; a writer holding
a stale read gets a ConflictError instead of overwriting a newer revision.
"""

import threading
from typing import Protocol

from freight_ledger.core.exceptions import ConflictError, LoadNotFoundError, ValidationError
from freight_ledger.data.models.load import Load


class LoadStore(Protocol):
    """Versioned load persistence."""

    def get(self, load_id: str) -> Load:
        """Return the current snapshot or raise LoadNotFoundError."""
        ...

    def insert(self, load: Load) -> Load:
        """Persist a new load at version 1."""
        ...

    def compare_and_set(self, load_id: str, expected_version: int, load: Load) -> Load:
        """Replace the load if its version still matches; returns the stored snapshot."""
        ...

    def delete(self, load_id: str, expected_version: int) -> Load:
        """Remove the load if its version still matches; returns the removed snapshot."""
        ...

    def next_load_number(self) -> str:
        """Allocate the next human-facing load number."""
        ...


class InMemoryLoadStore:
    """Thread-safe in-process LoadStore."""

    def __init__(self, load_number_prefix: str = "L") -> None:
        self._loads: dict[str, Load] = {}
        self._counter = 0
        self._prefix = load_number_prefix
        self._lock = threading.Lock()

    def get(self, load_id: str) -> Load:
        with self._lock:
            try:
                return self._loads[load_id]
            except KeyError:
                raise LoadNotFoundError(load_id) from None

    def list_loads(self) -> list[Load]:
        with self._lock:
            return list(self._loads.values())

    def insert(self, load: Load) -> Load:
        with self._lock:
            if load.id in self._loads:
                raise ValidationError(f"Load {load.id} already exists", field="id")
            stored = load.model_copy(update={"version": 1})
            self._loads[load.id] = stored
            return stored

    def compare_and_set(self, load_id: str, expected_version: int, load: Load) -> Load:
        with self._lock:
            current = self._loads.get(load_id)
            if current is None:
                raise LoadNotFoundError(load_id)
            if current.version != expected_version:
                raise ConflictError(load_id, expected_version, current.version)
            stored = load.model_copy(update={"version": expected_version + 1})
            self._loads[load_id] = stored
            return stored

    def delete(self, load_id: str, expected_version: int) -> Load:
        with self._lock:
            current = self._loads.get(load_id)
            if current is None:
                raise LoadNotFoundError(load_id)
            if current.version != expected_version:
                raise ConflictError(load_id, expected_version, current.version)
            del self._loads[load_id]
            return current

    def next_load_number(self) -> str:
        with self._lock:
            self._counter += 1
            return f"{self._prefix}-{self._counter:05d}"
