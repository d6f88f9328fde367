"""
Snapshot Storage Module

Persistence collaborators for ledger snapshots. The ledger defines only the
snapshot shape (Ledger.snapshot_state); these backends decide where it lives:
in memory (testing), a JSON file, or a SQLite database.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Union
from datetime import datetime, timezone
from pathlib import Path
import json
import os
import sqlite3
import threading

from .config import get_config
from .errors import SnapshotError
from .ledger import Ledger
from .logging_config import get_logger, log_action

logger = get_logger("wallet_ledger.storage")


class SnapshotStore(ABC):
    """Abstract interface for snapshot backends"""

    @abstractmethod
    def save(self, snapshot: Dict[str, Any]) -> None:
        """Persist a snapshot, replacing the previous one"""
        pass

    @abstractmethod
    def load(self) -> Optional[Dict[str, Any]]:
        """Load the most recent snapshot, or None if nothing was saved"""
        pass

    def close(self) -> None:
        """Release backend resources (default no-op)"""
        pass


class InMemorySnapshotStore(SnapshotStore):
    """In-memory snapshot store for testing"""

    def __init__(self):
        self._data: Optional[str] = None
        self._lock = threading.Lock()

    def save(self, snapshot: Dict[str, Any]) -> None:
        with self._lock:
            # Serialize to prevent external mutation
            self._data = json.dumps(snapshot, default=str)

    def load(self) -> Optional[Dict[str, Any]]:
        with self._lock:
            if self._data is None:
                return None
            return json.loads(self._data)


class JSONFileSnapshotStore(SnapshotStore):
    """Snapshot kept as a single JSON document on disk"""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.Lock()

    def save(self, snapshot: Dict[str, Any]) -> None:
        """Write to a temporary file and rename, so readers never see half a file"""
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path = self.path.with_name(self.path.name + ".tmp")
            with open(tmp_path, "w", encoding="utf-8") as fh:
                json.dump(snapshot, fh, indent=2, default=str)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(tmp_path, self.path)

    def load(self) -> Optional[Dict[str, Any]]:
        with self._lock:
            if not self.path.exists():
                return None
            try:
                with open(self.path, encoding="utf-8") as fh:
                    return json.load(fh)
            except json.JSONDecodeError as e:
                raise SnapshotError(f"Snapshot file {self.path} is not valid JSON: {e}") from e


class SQLiteSnapshotStore(SnapshotStore):
    """Snapshots stored as rows in SQLite; load returns the newest"""

    TABLE = "ledger_snapshots"

    def __init__(self, db_path: Union[str, Path] = ":memory:"):
        self.db_path = str(db_path)
        self._connection = sqlite3.connect(self.db_path, check_same_thread=False)
        self._connection.row_factory = sqlite3.Row
        self._lock = threading.RLock()

        with self._lock:
            if self.db_path != ":memory:":
                self._connection.execute("PRAGMA journal_mode = WAL")
            self._connection.execute(f"""
                CREATE TABLE IF NOT EXISTS {self.TABLE} (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    data TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)
            self._connection.commit()

    def save(self, snapshot: Dict[str, Any]) -> None:
        with self._lock:
            now = datetime.now(timezone.utc).isoformat()
            self._connection.execute(
                f"INSERT INTO {self.TABLE} (data, created_at) VALUES (?, ?)",
                (json.dumps(snapshot, default=str), now)
            )
            self._connection.commit()

    def load(self) -> Optional[Dict[str, Any]]:
        with self._lock:
            cursor = self._connection.execute(
                f"SELECT data FROM {self.TABLE} ORDER BY id DESC LIMIT 1"
            )
            row = cursor.fetchone()
            if row:
                return json.loads(row['data'])
            return None

    def count(self) -> int:
        """Number of snapshots saved so far"""
        with self._lock:
            cursor = self._connection.execute(f"SELECT COUNT(*) FROM {self.TABLE}")
            return cursor.fetchone()[0]

    def close(self) -> None:
        with self._lock:
            self._connection.close()


def create_snapshot_store(config) -> Optional[SnapshotStore]:
    """
    Build the snapshot backend named by config.snapshot_backend

    Returns:
        A SnapshotStore, or None when persistence is disabled

    Raises:
        ValueError: If the backend name is unknown
    """
    backend = config.snapshot_backend.lower()
    if backend == "none":
        return None
    if backend == "memory":
        return InMemorySnapshotStore()
    if backend == "json":
        return JSONFileSnapshotStore(config.snapshot_path)
    if backend == "sqlite":
        return SQLiteSnapshotStore(config.snapshot_path)
    raise ValueError(f"Unknown snapshot backend: {config.snapshot_backend}")


def save_ledger(ledger: Ledger, store: SnapshotStore) -> Dict[str, Any]:
    """Snapshot a ledger into a store and return the snapshot"""
    snapshot = ledger.snapshot_state()
    store.save(snapshot)
    log_action(
        logger, "info", "Ledger snapshot saved", action="snapshot_save",
        extra={
            "accounts": len(snapshot['accounts']),
            "next_transaction_id": snapshot['next_transaction_id'],
        }
    )
    return snapshot


def load_ledger(store: SnapshotStore, config=None, event_dispatcher=None) -> Ledger:
    """
    Restore a ledger from a store, or build an empty one if nothing was saved

    Raises:
        SnapshotError: If the stored snapshot cannot be restored
    """
    if config is None:
        config = get_config()

    snapshot = store.load()
    if snapshot is None:
        log_action(logger, "info", "No ledger snapshot found, starting empty",
                   action="snapshot_load")
        return Ledger.from_config(config, event_dispatcher=event_dispatcher)

    ledger = Ledger.restore_state(
        snapshot,
        event_dispatcher=event_dispatcher,
        opening_balance=config.opening_balance_amount,
        precision=config.amount_precision
    )
    log_action(
        logger, "info", "Ledger restored from snapshot", action="snapshot_load",
        extra={
            "accounts": len(snapshot.get('accounts', [])),
            "next_transaction_id": snapshot.get('next_transaction_id'),
        }
    )
    return ledger
