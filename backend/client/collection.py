import logging
from typing import Any

from client.api import ApiError, EntityApiClient

logger = logging.getLogger(__name__)


class EntityCollection:
    """
    Keeps a local list of one entity type in step with the server.

    Every mutation is followed by a full reload instead of patching `items`
    locally. A failed reload leaves the previous `items` in place and records
    the exception on `error`.
    """

    def __init__(self, api: EntityApiClient, entity_type: str, order_by: str | None = None):
        self.api = api
        self.entity_type = entity_type
        self.order_by = order_by
        self.items: list[dict[str, Any]] = []
        self.loading = False
        self.error: ApiError | None = None

    def reload(self) -> list[dict[str, Any]]:
        self.loading = True
        self.error = None
        try:
            self.items = self.api.get_entities(self.entity_type, order_by=self.order_by)
        except ApiError as exc:
            logger.warning("reload %s failed: %s", self.entity_type, exc)
            self.error = exc
        finally:
            self.loading = False
        return self.items

    def create(self, data: dict[str, Any]) -> dict[str, Any]:
        try:
            created = self.api.create_entity(self.entity_type, data)
        except ApiError as exc:
            self.error = exc
            raise
        self.reload()
        return created

    def update(self, entity_id: int, data: dict[str, Any]) -> dict[str, Any]:
        try:
            updated = self.api.update_entity(entity_id, data)
        except ApiError as exc:
            self.error = exc
            raise
        self.reload()
        return updated

    def remove(self, entity_id: int) -> None:
        try:
            self.api.delete_entity(entity_id)
        except ApiError as exc:
            self.error = exc
            raise
        self.reload()
