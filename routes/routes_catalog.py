# routes/routes_catalog.py - Catalogue : catégories, produits, conversions d'unités

import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from core.security import Actor, get_current_actor
from db.data_client import DataAccessError, DataClient
from models.data_models import (
    CATEGORY_COLUMNS,
    PRODUCT_COLUMNS,
    CategoryIn,
    CategoryOut,
    ProductIn,
    ProductOut,
    UnitConversionOut,
    from_record,
    to_record,
)
from routes.dependencies import get_data_client, http_error, require_permission
from services.unit_conversions import (
    convert_unit,
    get_available_conversions,
    get_conversion_factor,
    get_unit_category,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/catalog", tags=["Catalog"])


# === Catégories ===

@router.get("/categories", response_model=List[CategoryOut])
def list_categories(
    include_inactive: bool = False,
    actor: Actor = Depends(get_current_actor),
    client: DataClient = Depends(get_data_client),
):
    require_permission(actor, "categories", "canRead")
    filter = None if include_inactive else {"isactive": True}
    try:
        rows = client.find("categories", filter, order_by="name")
    except DataAccessError as e:
        raise http_error(e)
    return [CategoryOut(**from_record(r, CATEGORY_COLUMNS)) for r in rows]


@router.post("/categories", response_model=CategoryOut, status_code=201)
def create_category(
    category: CategoryIn,
    actor: Actor = Depends(get_current_actor),
    client: DataClient = Depends(get_data_client),
):
    require_permission(actor, "categories", "canCreate")
    try:
        row = client.insert("categories", to_record(category, CATEGORY_COLUMNS))
    except DataAccessError as e:
        raise http_error(e)
    logger.info(f"✅ Catégorie créée: {row['name']}")
    return CategoryOut(**from_record(row, CATEGORY_COLUMNS))


@router.put("/categories/{category_id}", response_model=CategoryOut)
def update_category(
    category_id: str,
    category: CategoryIn,
    actor: Actor = Depends(get_current_actor),
    client: DataClient = Depends(get_data_client),
):
    require_permission(actor, "categories", "canEdit")
    patch = to_record(category, CATEGORY_COLUMNS, exclude_unset=True)
    patch["updatedat"] = datetime.now(timezone.utc)
    try:
        row = client.update("categories", {"id": category_id}, patch)
    except DataAccessError as e:
        raise http_error(e)
    return CategoryOut(**from_record(row, CATEGORY_COLUMNS))


@router.delete("/categories/{category_id}", response_model=CategoryOut)
def deactivate_category(
    category_id: str,
    actor: Actor = Depends(get_current_actor),
    client: DataClient = Depends(get_data_client),
):
    """Suppression logique (isactive = False)."""
    require_permission(actor, "categories", "canDelete")
    try:
        row = client.update(
            "categories", {"id": category_id},
            {"isactive": False, "updatedat": datetime.now(timezone.utc)},
        )
    except DataAccessError as e:
        raise http_error(e)
    return CategoryOut(**from_record(row, CATEGORY_COLUMNS))


# === Produits ===

@router.get("/products", response_model=List[ProductOut])
def list_products(
    category_id: Optional[str] = Query(default=None, alias="categoryId"),
    include_inactive: bool = False,
    actor: Actor = Depends(get_current_actor),
    client: DataClient = Depends(get_data_client),
):
    require_permission(actor, "products", "canRead")
    filter = {} if include_inactive else {"isactive": True}
    if category_id:
        filter["categoryid"] = category_id
    try:
        rows = client.find("products", filter, order_by="name")
    except DataAccessError as e:
        raise http_error(e)
    return [ProductOut(**from_record(r, PRODUCT_COLUMNS)) for r in rows]


@router.get("/products/{product_id}", response_model=ProductOut)
def get_product(
    product_id: str,
    actor: Actor = Depends(get_current_actor),
    client: DataClient = Depends(get_data_client),
):
    require_permission(actor, "products", "canRead")
    try:
        row = client.find_one("products", {"id": product_id})
    except DataAccessError as e:
        raise http_error(e)
    return ProductOut(**from_record(row, PRODUCT_COLUMNS))


@router.post("/products", response_model=ProductOut, status_code=201)
def create_product(
    product: ProductIn,
    actor: Actor = Depends(get_current_actor),
    client: DataClient = Depends(get_data_client),
):
    require_permission(actor, "products", "canCreate")
    try:
        row = client.insert("products", to_record(product, PRODUCT_COLUMNS))
    except DataAccessError as e:
        raise http_error(e)
    logger.info(f"✅ Produit créé: {row['name']}")
    return ProductOut(**from_record(row, PRODUCT_COLUMNS))


@router.put("/products/{product_id}", response_model=ProductOut)
def update_product(
    product_id: str,
    product: ProductIn,
    actor: Actor = Depends(get_current_actor),
    client: DataClient = Depends(get_data_client),
):
    require_permission(actor, "products", "canEdit")
    patch = to_record(product, PRODUCT_COLUMNS, exclude_unset=True)
    patch["updatedat"] = datetime.now(timezone.utc)
    try:
        row = client.update("products", {"id": product_id}, patch)
    except DataAccessError as e:
        raise http_error(e)
    return ProductOut(**from_record(row, PRODUCT_COLUMNS))


@router.delete("/products/{product_id}", response_model=ProductOut)
def deactivate_product(
    product_id: str,
    actor: Actor = Depends(get_current_actor),
    client: DataClient = Depends(get_data_client),
):
    """Suppression logique (isactive = False)."""
    require_permission(actor, "products", "canDelete")
    try:
        row = client.update(
            "products", {"id": product_id},
            {"isactive": False, "updatedat": datetime.now(timezone.utc)},
        )
    except DataAccessError as e:
        raise http_error(e)
    return ProductOut(**from_record(row, PRODUCT_COLUMNS))


# === Unités ===

@router.get("/units/convert", response_model=UnitConversionOut)
async def convert_units(
    value: float,
    from_unit: str = Query(..., alias="from"),
    to_unit: str = Query(..., alias="to"),
):
    """Conversion entre unités d'une même famille (surface, longueur, volume, poids, temps)."""
    factor = get_conversion_factor(from_unit, to_unit)
    if factor is None:
        raise HTTPException(status_code=400, detail=f"No conversion from '{from_unit}' to '{to_unit}'")

    return UnitConversionOut(
        value=value,
        from_unit=from_unit,
        to_unit=to_unit,
        factor=factor,
        result=convert_unit(value, from_unit, to_unit),
        category=get_unit_category(from_unit),
    )


@router.get("/units/{unit}/conversions")
async def list_unit_conversions(unit: str):
    """Unités atteignables depuis une unité donnée."""
    return {
        "unit": unit,
        "category": get_unit_category(unit),
        "conversions": get_available_conversions(unit),
    }
