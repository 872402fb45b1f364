from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Path
from pydantic import BaseModel

from ecommerce.api.deps import get_db
from ecommerce.db import models
from ecommerce.services import user_service

router = APIRouter(prefix="/users", tags=["users"])


class UserPayload(BaseModel):
    """注册与整体更新共用；字段是否为空由 service 统一校验。"""

    name: str | None = None
    email: str | None = None
    username: str | None = None
    password: str | None = None


@router.post("", status_code=201)
def register_user(payload: UserPayload, conn=Depends(get_db)) -> dict:
    try:
        user = user_service.register_user(
            conn,
            name=payload.name,
            email=payload.email,
            username=payload.username,
            password=payload.password,
        )
    except user_service.ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except models.AlreadyExistsError as exc:
        raise HTTPException(status_code=409, detail="username already registered") from exc
    return {"message": "User registered successfully", "id": user.id}


@router.get("")
def list_users(conn=Depends(get_db)) -> dict:
    return {"items": [user_service.user_to_dict(u) for u in user_service.list_users(conn)]}


@router.get("/{user_id}")
def get_user(user_id: int = Path(..., ge=1, le=models.MAX_ROW_ID), conn=Depends(get_db)) -> dict:
    try:
        user = user_service.get_user_or_404(conn, user_id=user_id)
    except user_service.NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return user_service.user_to_dict(user)


@router.put("/{user_id}")
def update_user(
    payload: UserPayload,
    user_id: int = Path(..., ge=1, le=models.MAX_ROW_ID),
    conn=Depends(get_db),
) -> dict:
    try:
        user = user_service.update_user(
            conn,
            user_id=user_id,
            name=payload.name,
            email=payload.email,
            username=payload.username,
            password=payload.password,
        )
    except user_service.ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except user_service.NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except models.AlreadyExistsError as exc:
        raise HTTPException(status_code=409, detail="username already registered") from exc
    return user_service.user_to_dict(user)


@router.delete("/{user_id}")
def delete_user(user_id: int = Path(..., ge=1, le=models.MAX_ROW_ID), conn=Depends(get_db)) -> dict:
    try:
        user_service.delete_user(conn, user_id=user_id)
    except user_service.NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"message": "User deleted successfully"}
