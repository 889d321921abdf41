import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"{status_code}: {message}")
        self.status_code = status_code
        self.message = message


class EntityApiClient:
    """
    HTTP client for the entity endpoints. Pass an existing httpx.Client
    (e.g. a FastAPI TestClient) or a base_url to build one.
    """

    def __init__(
        self,
        base_url: str = "http://localhost:3001",
        http: httpx.Client | None = None,
        timeout: float = 10.0,
    ):
        self._owns_http = http is None
        self.http = http or httpx.Client(base_url=base_url, timeout=timeout)

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = self.http.request(method, f"/api{path}", **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %s", method, path, exc)
            raise ApiError(0, str(exc)) from exc

        if response.status_code >= 400:
            try:
                message = response.json().get("error") or response.text
            except ValueError:
                message = response.text
            raise ApiError(response.status_code, message)
        return response.json()

    def health(self) -> dict:
        return self._request("GET", "/health")

    def test_connection(self) -> dict:
        try:
            data = self._request("GET", "/db-test")
        except ApiError as exc:
            return {"success": False, "error": exc.message}
        return {"success": bool(data.get("success")), "error": None}

    def get_entities(self, entity_type: str, order_by: str | None = None) -> list[dict]:
        params = {"orderBy": order_by} if order_by else None
        return self._request("GET", f"/entities/{entity_type}", params=params)

    def get_entity(self, entity_type: str, entity_id: int) -> dict:
        return self._request("GET", f"/entities/{entity_type}/{entity_id}")

    def count_entities(self, entity_type: str) -> int:
        return int(self._request("GET", f"/entities/{entity_type}/count")["count"])

    def find_entities(self, entity_type: str, conditions: dict[str, Any]) -> list[dict]:
        return self._request("POST", f"/entities/{entity_type}/search", json={"conditions": conditions})

    def create_entity(self, entity_type: str, data: dict[str, Any]) -> dict:
        return self._request("POST", "/entities", json={"entity_type": entity_type, "data": data})

    def update_entity(self, entity_id: int, data: dict[str, Any]) -> dict:
        return self._request("PUT", f"/entities/{entity_id}", json={"data": data})

    def delete_entity(self, entity_id: int) -> dict:
        return self._request("DELETE", f"/entities/{entity_id}")
