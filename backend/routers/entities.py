# routers/entities.py

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from core.errors import EntityNotFoundError
from db.deps import get_db
from db.executor import QueryExecutor
from models.requests import EntityCreateRequest, EntitySearchRequest, EntityUpdateRequest
from services.entity_repository import EntityRepository, repository_for, resolve_entity_type
from services.export_service import EXPORT_FORMATS, export_entities

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/entities", tags=["entities"])


def _normalize_type(entity_type: str | None) -> str | None:
    if entity_type is None:
        return None
    cleaned = entity_type.strip()
    return cleaned or None


def _repo(
    request: Request,
    db: Session,
    entity_type: str,
    order_by: str | None = None,
) -> EntityRepository:
    retries = request.app.state.settings.update_retries
    return repository_for(QueryExecutor(db), entity_type, order_by=order_by, update_retries=retries)


def _require_type(entity_type: str | None) -> str:
    normalized = _normalize_type(entity_type)
    if normalized is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="entity_type is required")
    return normalized


def _type_for_id(db: Session, entity_id: int) -> str:
    entity_type = resolve_entity_type(QueryExecutor(db), entity_id)
    if entity_type is None:
        raise EntityNotFoundError(entity_id=entity_id)
    return entity_type


def _update(request: Request, db: Session, entity_type: str, entity_id: int, data: dict[str, Any]):
    entity = _repo(request, db, entity_type).update(entity_id, data)
    db.commit()
    return entity


def _delete(request: Request, db: Session, entity_type: str, entity_id: int):
    deleted = _repo(request, db, entity_type).remove(entity_id)
    if not deleted:
        raise EntityNotFoundError(entity_type, entity_id)
    db.commit()
    return {"success": True, "id": entity_id}


# --------------------------------------------------
# READ
# --------------------------------------------------
@router.get("/{entity_type}")
def list_entities(
    entity_type: str,
    request: Request,
    order_by: str | None = Query(None, alias="orderBy"),
    db: Session = Depends(get_db),
):
    return _repo(request, db, _require_type(entity_type), order_by=order_by).list()


@router.get("/{entity_type}/count")
def count_entities(entity_type: str, request: Request, db: Session = Depends(get_db)):
    entity_type = _require_type(entity_type)
    return {"entity_type": entity_type, "count": _repo(request, db, entity_type).count()}


@router.get("/{entity_type}/export")
def export_entity_type(
    entity_type: str,
    request: Request,
    format: str = Query("csv"),
    order_by: str | None = Query(None, alias="orderBy"),
    db: Session = Depends(get_db),
):
    entity_type = _require_type(entity_type)
    fmt = (format or "csv").strip().lower()
    if fmt not in EXPORT_FORMATS:
        raise HTTPException(status_code=400, detail="format must be csv or json")

    entities = _repo(request, db, entity_type, order_by=order_by).list()
    if not entities:
        raise HTTPException(status_code=404, detail=f"No {entity_type} entities to export")

    content, media_type = export_entities(entities, fmt)
    filename = f"{entity_type.lower()}.{fmt}"
    return StreamingResponse(
        iter([content]),
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/{entity_type}/search")
def search_entities(
    entity_type: str,
    payload: EntitySearchRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    repo = _repo(request, db, _require_type(entity_type))
    if payload.first:
        entity = repo.find_one(payload.conditions)
        if entity is None:
            raise EntityNotFoundError(repo.entity_type)
        return entity
    return repo.find_where(payload.conditions)


@router.get("/{entity_type}/{entity_id}")
def get_entity(entity_type: str, entity_id: int, request: Request, db: Session = Depends(get_db)):
    entity_type = _require_type(entity_type)
    entity = _repo(request, db, entity_type).get(entity_id)
    if entity is None:
        raise EntityNotFoundError(entity_type, entity_id)
    return entity


# --------------------------------------------------
# CREATE
# --------------------------------------------------
@router.post("", status_code=status.HTTP_201_CREATED)
def create_entity(payload: EntityCreateRequest, request: Request, db: Session = Depends(get_db)):
    entity = _repo(request, db, _require_type(payload.entity_type)).create(payload.data)
    db.commit()
    return entity


@router.post("/{entity_type}", status_code=status.HTTP_201_CREATED)
def create_typed_entity(
    entity_type: str,
    payload: EntityCreateRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    path_type = _require_type(entity_type)
    body_type = _normalize_type(payload.entity_type)
    if body_type is not None and body_type != path_type:
        raise HTTPException(
            status_code=400,
            detail=f"entity_type mismatch: path={path_type} body={body_type}",
        )

    entity = _repo(request, db, path_type).create(payload.data)
    db.commit()
    return entity


# --------------------------------------------------
# UPDATE
# --------------------------------------------------
@router.put("/{entity_id}")
def update_entity(
    entity_id: int,
    payload: EntityUpdateRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    return _update(request, db, _type_for_id(db, entity_id), entity_id, payload.data)


@router.put("/{entity_type}/{entity_id}")
def update_typed_entity(
    entity_type: str,
    entity_id: int,
    payload: EntityUpdateRequest,
    request: Request,
    db: Session = Depends(get_db),
):
    return _update(request, db, _require_type(entity_type), entity_id, payload.data)


# --------------------------------------------------
# DELETE
# --------------------------------------------------
@router.delete("/{entity_id}")
def delete_entity(entity_id: int, request: Request, db: Session = Depends(get_db)):
    return _delete(request, db, _type_for_id(db, entity_id), entity_id)


@router.delete("/{entity_type}/{entity_id}")
def delete_typed_entity(
    entity_type: str,
    entity_id: int,
    request: Request,
    db: Session = Depends(get_db),
):
    return _delete(request, db, _require_type(entity_type), entity_id)
