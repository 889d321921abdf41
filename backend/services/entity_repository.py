from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from datetime import date, datetime, timezone
from typing import Any, Iterator

from sqlalchemy.exc import SQLAlchemyError

from core.errors import ConflictError, EntityNotFoundError, StorageError
from db.executor import QueryExecutor
from models.entities import METADATA_KEYS
from models.kinds import default_order_by
from services.ordering import sort_items
from services.validation import Validator, validator_for

logger = logging.getLogger(__name__)

_SELECT_COLUMNS = "id, data, version, created_at, updated_at"


def _timestamp(value: Any):
    # SQLite hands back 'YYYY-MM-DD HH:MM:SS' text, psycopg2 a tz-aware datetime
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return value
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return value


def _matches(item: dict[str, Any], key: str, value: Any) -> bool:
    # exact: True must not match 1, nor 1.0 match 1
    return key in item and type(item[key]) is type(value) and item[key] == value


def _decode_data(raw: Any) -> dict:
    # psycopg2 hands back JSON columns already parsed, SQLite returns text
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Skipping undecodable entity payload")
            return {}
    return dict(raw) if isinstance(raw, dict) else {}


def strip_metadata(data: dict[str, Any] | None) -> dict[str, Any]:
    return {k: v for k, v in (data or {}).items() if k not in METADATA_KEYS}


def row_to_entity(row: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": int(row["id"]),
        **strip_metadata(_decode_data(row.get("data"))),
        "created_at": _timestamp(row.get("created_at")),
        "updated_at": _timestamp(row.get("updated_at")),
    }


def resolve_entity_type(executor: QueryExecutor, entity_id: int) -> str | None:
    try:
        rows = executor.query(
            "SELECT entity_type FROM entities WHERE id = :id",
            {"id": entity_id},
        )
    except SQLAlchemyError as exc:
        raise StorageError(f"Failed to look up entity {entity_id}: {exc}") from exc
    return rows[0]["entity_type"] if rows else None


class EntityRepository:
    """
    CRUD over one entity type in the shared `entities` table.

    Entity fields live in the JSON `data` column, so `order_by` may name any
    payload field: sorting and `find_where` filtering happen in memory after the
    rows are decoded. That is fine for small-to-medium sets (a few thousand rows
    per type); anything larger wants real columns or indexed JSON expressions.

    `update` is read-merge-write guarded by the row's `version`: the write only
    lands if nobody else wrote in between, otherwise it re-reads and re-merges.
    """

    def __init__(
        self,
        executor: QueryExecutor,
        entity_type: str,
        order_by: str | None = None,
        validator: Validator | None = None,
        update_retries: int = 3,
    ):
        self.executor = executor
        self.entity_type = entity_type
        self.order_by = order_by
        self.validator = validator
        self.update_retries = max(1, update_retries)

    @contextmanager
    def _storage(self, action: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            logger.error("STORAGE: %s failed type=%s: %s", action, self.entity_type, exc)
            raise StorageError(f"Failed to {action} {self.entity_type}: {exc}") from exc

    def _load_row(self, entity_id: int) -> dict[str, Any] | None:
        with self._storage("read"):
            rows = self.executor.query(
                f"""
                SELECT {_SELECT_COLUMNS}
                FROM entities
                WHERE entity_type = :entity_type AND id = :id
                """,
                {"entity_type": self.entity_type, "id": entity_id},
            )
        return rows[0] if rows else None

    def _write(self, entity_id: int, data: dict[str, Any], version: int) -> bool:
        with self._storage("update"):
            updated = self.executor.run(
                """
                UPDATE entities
                SET data = :data, version = version + 1, updated_at = CURRENT_TIMESTAMP
                WHERE entity_type = :entity_type AND id = :id AND version = :version
                """,
                {
                    "data": json.dumps(data, default=str),
                    "entity_type": self.entity_type,
                    "id": entity_id,
                    "version": version,
                },
            )
        return updated == 1

    def list(self) -> list[dict[str, Any]]:
        with self._storage("list"):
            rows = self.executor.query(
                f"""
                SELECT {_SELECT_COLUMNS}
                FROM entities
                WHERE entity_type = :entity_type
                ORDER BY id
                """,
                {"entity_type": self.entity_type},
            )
        items = [row_to_entity(row) for row in rows]
        if self.order_by:
            return sort_items(items, self.order_by)
        return items

    def get(self, entity_id: int) -> dict[str, Any] | None:
        row = self._load_row(entity_id)
        return row_to_entity(row) if row is not None else None

    def create(self, data: dict[str, Any]) -> dict[str, Any]:
        payload = strip_metadata(data)
        if self.validator is not None:
            payload = self.validator(payload)

        with self._storage("create"):
            result = self.executor.execute(
                """
                INSERT INTO entities (entity_type, data)
                VALUES (:entity_type, :data)
                RETURNING id
                """,
                {"entity_type": self.entity_type, "data": json.dumps(payload, default=str)},
            )

        if result.last_insert_id is None:
            raise StorageError(f"Insert into {self.entity_type} returned no id")

        created = self.get(result.last_insert_id)
        if created is None:
            raise StorageError(f"Created {self.entity_type} {result.last_insert_id} could not be read back")

        logger.info("CREATE: type=%s id=%s", self.entity_type, created["id"])
        return created

    def update(self, entity_id: int, partial: dict[str, Any]) -> dict[str, Any]:
        patch = strip_metadata(partial)

        for attempt in range(1, self.update_retries + 1):
            row = self._load_row(entity_id)
            if row is None:
                raise EntityNotFoundError(self.entity_type, entity_id)

            # shallow: nested objects in the patch replace the stored ones wholesale
            merged = {**strip_metadata(_decode_data(row.get("data"))), **patch}
            if self.validator is not None:
                merged = self.validator(merged)

            if self._write(entity_id, merged, int(row["version"])):
                logger.info("UPDATE: type=%s id=%s fields=%s", self.entity_type, entity_id, sorted(patch))
                updated = self.get(entity_id)
                if updated is None:
                    raise EntityNotFoundError(self.entity_type, entity_id)
                return updated

            logger.warning(
                "UPDATE: version moved under us type=%s id=%s attempt=%s",
                self.entity_type,
                entity_id,
                attempt,
            )

        raise ConflictError(
            f"{self.entity_type} {entity_id} was modified concurrently; retry the update"
        )

    def remove(self, entity_id: int) -> bool:
        with self._storage("delete"):
            deleted = self.executor.run(
                "DELETE FROM entities WHERE entity_type = :entity_type AND id = :id",
                {"entity_type": self.entity_type, "id": entity_id},
            )
        if deleted:
            logger.info("DELETE: type=%s id=%s", self.entity_type, entity_id)
        return deleted > 0

    def count(self) -> int:
        with self._storage("count"):
            rows = self.executor.query(
                "SELECT COUNT(*) AS count FROM entities WHERE entity_type = :entity_type",
                {"entity_type": self.entity_type},
            )
        return int(rows[0]["count"]) if rows else 0

    def find_where(self, conditions: dict[str, Any]) -> list[dict[str, Any]]:
        # full scan of the type; no index is involved
        return [
            item
            for item in self.list()
            if all(_matches(item, key, value) for key, value in conditions.items())
        ]

    def find_one(self, conditions: dict[str, Any]) -> dict[str, Any] | None:
        matches = self.find_where(conditions)
        return matches[0] if matches else None


def repository_for(
    executor: QueryExecutor,
    entity_type: str,
    order_by: str | None = None,
    update_retries: int = 3,
) -> EntityRepository:
    """Repository wired with the kind's validator and default ordering, if the kind is known."""
    return EntityRepository(
        executor,
        entity_type,
        order_by=order_by or default_order_by(entity_type),
        validator=validator_for(entity_type),
        update_retries=update_retries,
    )
