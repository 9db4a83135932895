"""
Collection Store — the persistence collaborator for ordered collections.

Holds entities and their sort keys, and furnishes the serialization boundary
the kernel itself does not provide.

Behavioral Contract:
- Snapshots are always returned ascending by sort key
- `(collection_id, sort_key)` is unique at rest
- `reorder` holds the store lock from snapshot read through commit, and the
  commit itself is an optimistic version check; a stale version is reported
  as an uncommitted outcome, never retried
- Rebalancing only happens when `renumber` is called explicitly
"""

import json
import logging
import sqlite3
import threading
from datetime import datetime
from typing import Dict, List, Optional

from reorder_kernel.errors import NotFoundError, ReorderValidationError
from reorder_kernel.models.entity import OrderedCollection, SortableEntity
from reorder_kernel.models.keyspace import KeyspaceConfig
from reorder_kernel.models.reorder import ReorderOutcome, ReorderRequest
from reorder_kernel.orchestrator.reorder import ReorderOrchestrator
from reorder_kernel.sort_keys.provider import SortKeyProvider, build_provider

logger = logging.getLogger(__name__)

# Sorts after every base64 and numeric key; used while renumbering
_PARKING_PREFIX = "~"


class CollectionStore:
    """
    SQLite-backed store. Pass a file path for durability;
    the default in-memory database suits tests and prototypes.
    """

    def __init__(
        self,
        db_path: str = ":memory:",
        orchestrator: Optional[ReorderOrchestrator] = None,
    ):
        self.db_path = db_path
        self.orchestrator = orchestrator or ReorderOrchestrator()
        self._lock = threading.RLock()
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._init_schema()

    def _init_schema(self) -> None:
        """Create the collection tables if they don't exist."""
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS collections (
                id TEXT PRIMARY KEY,
                keyspace_json TEXT NOT NULL,
                created_at TEXT NOT NULL
            )
        """)
        self._conn.execute("""
            CREATE TABLE IF NOT EXISTS entities (
                collection_id TEXT NOT NULL REFERENCES collections(id),
                id TEXT NOT NULL,
                sort_key TEXT NOT NULL,
                version INTEGER NOT NULL DEFAULT 1,
                properties_json TEXT NOT NULL DEFAULT '{}',
                PRIMARY KEY (collection_id, id)
            )
        """)
        self._conn.execute("""
            CREATE UNIQUE INDEX IF NOT EXISTS idx_entities_sort_key
            ON entities(collection_id, sort_key)
        """)
        self._conn.commit()

    # --- Collections ---

    def create_collection(
        self, collection_id: str, keyspace: Optional[KeyspaceConfig] = None
    ) -> OrderedCollection:
        collection = OrderedCollection(
            id=collection_id,
            keyspace=keyspace or KeyspaceConfig(),
            created_at=datetime.utcnow(),
            entity_count=0,
        )
        with self._lock:
            if self._find_collection_row(collection_id) is not None:
                raise ReorderValidationError(
                    f"collection {collection_id!r} already exists"
                )
            self._conn.execute(
                "INSERT INTO collections (id, keyspace_json, created_at) VALUES (?, ?, ?)",
                (
                    collection.id,
                    collection.keyspace.model_dump_json(),
                    collection.created_at.isoformat(),
                ),
            )
            self._conn.commit()
        logger.info(
            "created collection %s with %s keyspace",
            collection_id, collection.keyspace.kind.value,
        )
        return collection

    def get_collection(self, collection_id: str) -> OrderedCollection:
        row = self._find_collection_row(collection_id)
        if row is None:
            raise NotFoundError(f"cannot locate {{ collection_id: {collection_id!r} }}")
        count = self._conn.execute(
            "SELECT COUNT(*) FROM entities WHERE collection_id = ?",
            (collection_id,),
        ).fetchone()[0]
        return OrderedCollection(
            id=row["id"],
            keyspace=KeyspaceConfig.model_validate_json(row["keyspace_json"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            entity_count=count,
        )

    def provider_for(self, collection_id: str) -> SortKeyProvider:
        """The sort key provider fixed for this collection."""
        return build_provider(self.get_collection(collection_id).keyspace)

    # --- Entities ---

    def list_entities(self, collection_id: str) -> List[SortableEntity]:
        """Snapshot of the collection, ascending by sort key."""
        self.get_collection(collection_id)
        rows = self._conn.execute(
            """
            SELECT id, sort_key, version, properties_json FROM entities
            WHERE collection_id = ? ORDER BY sort_key ASC
            """,
            (collection_id,),
        ).fetchall()
        return [self._row_to_entity(r) for r in rows]

    def get_entity(self, collection_id: str, entity_id: str) -> SortableEntity:
        row = self._find_entity_row(collection_id, entity_id)
        if row is None:
            raise NotFoundError(
                f"cannot locate {{ entity_id: {entity_id!r} }} "
                f"in collection {collection_id!r}"
            )
        return self._row_to_entity(row)

    def add_entity(
        self,
        collection_id: str,
        entity_id: str,
        properties: Optional[dict] = None,
    ) -> SortableEntity:
        """Append a new entity after the current last one."""
        with self._lock:
            provider = self.provider_for(collection_id)
            if self._find_entity_row(collection_id, entity_id) is not None:
                raise ReorderValidationError(
                    f"entity {entity_id!r} already exists in collection {collection_id!r}"
                )
            last = self._conn.execute(
                """
                SELECT sort_key FROM entities WHERE collection_id = ?
                ORDER BY sort_key DESC LIMIT 1
                """,
                (collection_id,),
            ).fetchone()
            sort_key = provider.key_between(last["sort_key"] if last else None, None)

            entity = SortableEntity(
                id=entity_id, sort_key=sort_key, properties=properties or {}
            )
            self._conn.execute(
                """
                INSERT INTO entities (collection_id, id, sort_key, version, properties_json)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    collection_id,
                    entity.id,
                    entity.sort_key,
                    entity.version,
                    json.dumps(entity.properties, default=str),
                ),
            )
            self._conn.commit()
        logger.debug("appended %s to %s with key %r", entity_id, collection_id, sort_key)
        return entity

    def remove_entity(self, collection_id: str, entity_id: str) -> bool:
        """Remove an entity; the remaining keys are left as they are."""
        with self._lock:
            cursor = self._conn.execute(
                "DELETE FROM entities WHERE collection_id = ? AND id = ?",
                (collection_id, entity_id),
            )
            self._conn.commit()
        return cursor.rowcount == 1

    def commit_sort_key(
        self,
        collection_id: str,
        entity_id: str,
        new_key: str,
        expected_version: Optional[int] = None,
    ) -> bool:
        """
        Write one entity's sort key and bump its version.

        With `expected_version`, the write only applies if nobody else has
        written the entity since the snapshot was taken.
        """
        with self._lock:
            if expected_version is None:
                cursor = self._conn.execute(
                    """
                    UPDATE entities SET sort_key = ?, version = version + 1
                    WHERE collection_id = ? AND id = ?
                    """,
                    (new_key, collection_id, entity_id),
                )
            else:
                cursor = self._conn.execute(
                    """
                    UPDATE entities SET sort_key = ?, version = version + 1
                    WHERE collection_id = ? AND id = ? AND version = ?
                    """,
                    (new_key, collection_id, entity_id, expected_version),
                )
            self._conn.commit()
        return cursor.rowcount == 1

    # --- Ordering ---

    def reorder(self, collection_id: str, request: ReorderRequest) -> ReorderOutcome:
        """Apply one reorder against a fresh snapshot, serialized by the store lock."""
        with self._lock:
            provider = self.provider_for(collection_id)
            snapshot = self.list_entities(collection_id)
            versions: Dict[str, int] = {e.id: e.version for e in snapshot}

            def commit(entity_id: str, new_key: str) -> bool:
                return self.commit_sort_key(
                    collection_id, entity_id, new_key, versions[entity_id]
                )

            return self.orchestrator.reorder(snapshot, request, provider, commit)

    def renumber(self, collection_id: str) -> List[SortableEntity]:
        """
        Reassign evenly spaced keys to every entity, keeping current order.
        Restores insertion headroom after a KeyspaceExhaustedError.
        """
        with self._lock:
            provider = self.provider_for(collection_id)
            snapshot = self.list_entities(collection_id)
            new_keys = provider.spread_keys(len(snapshot))

            with self._conn:
                # park every key out of the way so the unique index holds mid-update
                self._conn.execute(
                    "UPDATE entities SET sort_key = ? || id WHERE collection_id = ?",
                    (_PARKING_PREFIX, collection_id),
                )
                self._conn.executemany(
                    """
                    UPDATE entities SET sort_key = ?, version = version + 1
                    WHERE collection_id = ? AND id = ?
                    """,
                    [
                        (key, collection_id, entity.id)
                        for entity, key in zip(snapshot, new_keys)
                    ],
                )

        logger.info("renumbered %d entities in %s", len(snapshot), collection_id)
        return self.list_entities(collection_id)

    def close(self) -> None:
        self._conn.close()

    # --- Internals ---

    def _find_collection_row(self, collection_id: str) -> Optional[sqlite3.Row]:
        return self._conn.execute(
            "SELECT id, keyspace_json, created_at FROM collections WHERE id = ?",
            (collection_id,),
        ).fetchone()

    def _find_entity_row(
        self, collection_id: str, entity_id: str
    ) -> Optional[sqlite3.Row]:
        return self._conn.execute(
            """
            SELECT id, sort_key, version, properties_json FROM entities
            WHERE collection_id = ? AND id = ?
            """,
            (collection_id, entity_id),
        ).fetchone()

    def _row_to_entity(self, row: sqlite3.Row) -> SortableEntity:
        return SortableEntity(
            id=row["id"],
            sort_key=row["sort_key"],
            version=row["version"],
            properties=json.loads(row["properties_json"]),
        )
