from __future__ import annotations

import logging
import math
import sqlite3

from ecommerce.db import models

logger = logging.getLogger(__name__)


class NotFoundError(RuntimeError):
    pass


class ValidationError(ValueError):
    pass


def create_product(conn: sqlite3.Connection, *, name: str | None, price: float | None) -> models.Product:
    if price is not None and not math.isfinite(price):
        raise ValidationError("product price must be a finite number")
    if price is None or price <= 0:
        raise ValidationError("product price must be greater than zero")
    clean_name = (name or "").strip()
    if not clean_name:
        raise ValidationError("product name is required")

    product = models.create_product(conn, name=clean_name, price=price)
    logger.info("product created: id=%s name=%r", product.id, product.name)
    return product


def get_product_or_404(conn: sqlite3.Connection, *, product_id: int) -> models.Product:
    product = models.get_product_by_id(conn, product_id)
    if product is None:
        raise NotFoundError("Product not found")
    return product


def list_products(conn: sqlite3.Connection) -> list[models.Product]:
    return models.list_products(conn)


def update_product(
    conn: sqlite3.Connection,
    *,
    product_id: int,
    name: str | None = None,
    price: float | None = None,
) -> models.Product:
    """部分更新：空 name / 0 price 视为未提交，沿用旧值；合并后再校验。"""

    existing = get_product_or_404(conn, product_id=product_id)

    merged_name = existing.name
    if name is not None and name.strip():
        merged_name = name.strip()
    merged_price = existing.price
    if price is not None and price != 0:
        merged_price = float(price)

    if not math.isfinite(merged_price):
        raise ValidationError("product price must be a finite number")
    if not merged_name or merged_price <= 0:
        raise ValidationError("all fields are required")

    product = models.update_product_fields(
        conn,
        product_id=product_id,
        fields={"name": merged_name, "price": merged_price},
    )
    logger.info("product updated: id=%s", product_id)
    return product


def delete_product(conn: sqlite3.Connection, *, product_id: int) -> None:
    if not models.delete_product(conn, product_id):
        raise NotFoundError(f"product with id {product_id} not found")
    logger.info("product deleted: id=%s", product_id)


def product_to_dict(product: models.Product) -> dict:
    return {
        "id": product.id,
        "name": product.name,
        "price": product.price,
        "created_at": product.created_at,
        "updated_at": product.updated_at,
    }
