import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

Params = dict[str, Any] | None


@dataclass
class ExecuteResult:
    last_insert_id: int | None = None


def _to_int(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class QueryExecutor:
    """
    Thin wrapper over a Session for parametrized SQL.
    Values always travel as bound parameters, never as SQL text.
    """

    def __init__(self, db: Session):
        self.db = db

    def query(self, sql: str, params: Params = None) -> list[dict[str, Any]]:
        try:
            result = self.db.execute(text(sql), params or {})
            return [dict(row) for row in result.mappings().all()]
        except SQLAlchemyError:
            logger.exception("QUERY failed: %s", sql.strip().split("\n", 1)[0])
            raise

    def run(self, sql: str, params: Params = None) -> int:
        try:
            result = self.db.execute(text(sql), params or {})
            return int(result.rowcount or 0)
        except SQLAlchemyError:
            logger.exception("RUN failed: %s", sql.strip().split("\n", 1)[0])
            raise

    def execute(self, sql: str, params: Params = None) -> ExecuteResult:
        try:
            result = self.db.execute(text(sql), params or {})
            if result.returns_rows:
                row = result.mappings().first()
                last_id = _to_int(row.get("id")) if row else None
            else:
                last_id = _to_int(getattr(result, "lastrowid", None))
            return ExecuteResult(last_insert_id=last_id)
        except SQLAlchemyError:
            logger.exception("EXECUTE failed: %s", sql.strip().split("\n", 1)[0])
            raise
