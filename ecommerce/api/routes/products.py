"""
商品接口（整组受 AuthGate 保护）。
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Path
from pydantic import BaseModel

from ecommerce.api.deps import get_db, require_auth
from ecommerce.db import models
from ecommerce.services import product_service

router = APIRouter(prefix="/products", tags=["products"], dependencies=[Depends(require_auth)])


class ProductCreateRequest(BaseModel):
    name: str
    price: float


class ProductUpdateRequest(BaseModel):
    name: str | None = None
    price: float | None = None


@router.post("", status_code=201)
def create_product(payload: ProductCreateRequest, conn=Depends(get_db)) -> dict:
    try:
        product = product_service.create_product(conn, name=payload.name, price=payload.price)
    except product_service.ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return product_service.product_to_dict(product)


@router.get("")
def list_products(conn=Depends(get_db)) -> dict:
    return {"items": [product_service.product_to_dict(p) for p in product_service.list_products(conn)]}


@router.get("/{product_id}")
def get_product(product_id: int = Path(..., ge=1, le=models.MAX_ROW_ID), conn=Depends(get_db)) -> dict:
    try:
        product = product_service.get_product_or_404(conn, product_id=product_id)
    except product_service.NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return product_service.product_to_dict(product)


@router.put("/{product_id}")
def update_product(
    payload: ProductUpdateRequest,
    product_id: int = Path(..., ge=1, le=models.MAX_ROW_ID),
    conn=Depends(get_db),
) -> dict:
    try:
        product = product_service.update_product(
            conn,
            product_id=product_id,
            name=payload.name,
            price=payload.price,
        )
    except product_service.NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except product_service.ValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return product_service.product_to_dict(product)


@router.delete("/{product_id}")
def delete_product(product_id: int = Path(..., ge=1, le=models.MAX_ROW_ID), conn=Depends(get_db)) -> dict:
    try:
        product_service.delete_product(conn, product_id=product_id)
    except product_service.NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"message": "Product deleted successfully"}
