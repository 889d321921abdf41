from typing import Any

from pydantic import BaseModel, Field


class EntityCreateRequest(BaseModel):
    entity_type: str | None = Field(None, min_length=1)
    data: dict[str, Any] = Field(default_factory=dict)


class EntityUpdateRequest(BaseModel):
    data: dict[str, Any] = Field(default_factory=dict)


class EntitySearchRequest(BaseModel):
    conditions: dict[str, Any] = Field(default_factory=dict)
    first: bool = False
