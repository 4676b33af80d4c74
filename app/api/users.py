from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException

from app.models.schemas import DeleteResponse, UserCreate, UserRecord
from app.services.errors import NotFoundError, StoreUnavailableError, ValidationError
from app.services.store_dependencies import get_store
from app.services.user_store import UserStore

router = APIRouter(tags=["users"])

logger = logging.getLogger(__name__)


@contextmanager
def _lookup_by_id(user_id: str) -> Iterator[None]:
    """Map store failures for a by-id request onto 400/404.

    Anything unexpected while resolving the id still answers 404; only an
    unavailable store is allowed through to the 503 handler.
    """

    try:
        yield
    except (StoreUnavailableError, HTTPException):
        raise
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except Exception as exc:  # noqa: BLE001
        logger.exception("user.lookup_failed", extra={"user_id": user_id})
        raise HTTPException(status_code=404, detail="User not found") from exc


@router.get("/users", response_model=list[UserRecord])
def list_users(store: UserStore = Depends(get_store)) -> list[UserRecord]:
    return store.list_users()


@router.post("/users", response_model=UserRecord, status_code=201)
def create_user(payload: UserCreate, store: UserStore = Depends(get_store)) -> UserRecord:
    try:
        return store.create(payload.model_dump())
    except ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@router.get("/users/{user_id}", response_model=UserRecord)
def get_user(user_id: str, store: UserStore = Depends(get_store)) -> UserRecord:
    with _lookup_by_id(user_id):
        return store.get(user_id)


@router.put("/users/{user_id}", response_model=UserRecord)
def update_user(
    user_id: str,
    payload: Any = Body(default=None),
    store: UserStore = Depends(get_store),
) -> UserRecord:
    # Body is checked by the store after the id resolves, so unknown ids answer 404 first.
    fields = {} if payload is None else payload
    with _lookup_by_id(user_id):
        if not isinstance(fields, dict):
            store.get(user_id)
            raise ValidationError(invalid=["body"])
        return store.update(user_id, fields)


@router.delete("/users/{user_id}", response_model=DeleteResponse)
def delete_user(user_id: str, store: UserStore = Depends(get_store)) -> DeleteResponse:
    with _lookup_by_id(user_id):
        store.delete(user_id)
    return DeleteResponse()
