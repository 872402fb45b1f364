"""
登录接口：用户名/密码换 token。
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ecommerce.api.deps import get_db, get_token_codec
from ecommerce.core.tokens import SigningError
from ecommerce.services import user_service

router = APIRouter(tags=["auth"])


class LoginRequest(BaseModel):
    username: str
    password: str


@router.post("/login")
def login(payload: LoginRequest, conn=Depends(get_db), codec=Depends(get_token_codec)) -> dict:
    try:
        token = user_service.login(conn, codec, username=payload.username, password=payload.password)
    except user_service.InvalidCredentialsError as exc:
        raise HTTPException(status_code=401, detail=str(exc)) from exc
    except SigningError as exc:
        raise HTTPException(status_code=500, detail="failed to issue token") from exc
    return {"token": token}
