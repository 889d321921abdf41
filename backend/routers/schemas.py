from fastapi import APIRouter, HTTPException

from models.kinds import KINDS, describe_kind, get_kind

router = APIRouter(prefix="/api/schemas", tags=["schemas"])


@router.get("")
def list_schemas():
    return {name: describe_kind(kind) for name, kind in KINDS.items()}


@router.get("/{entity_type}")
def get_schema(entity_type: str):
    kind = get_kind(entity_type.strip())
    if kind is None:
        raise HTTPException(status_code=404, detail=f"No descriptor for entity type {entity_type}")
    return describe_kind(kind)
