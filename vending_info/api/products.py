"""Product catalog endpoints."""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy import func
from sqlalchemy.orm import Session

from vending_info.api.deps import AuthContext, require_admin, require_auth
from vending_info.core.config import settings
from vending_info.core.limiter import limiter
from vending_info.core.schemas.auth import MessageResponse
from vending_info.core.schemas.product import Product, ProductCreate, ProductUpdate
from vending_info.db.models.machine import MachineProduct
from vending_info.db.models.product import Product as ProductModel
from vending_info.db.session import get_db

router = APIRouter()

SEARCH_RESULT_LIMIT = 10


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _find_by_name(db: Session, name: str) -> Optional[ProductModel]:
    return (
        db.query(ProductModel)
        .filter(func.lower(ProductModel.name) == name.lower())
        .first()
    )


def _get_product_or_404(db: Session, product_id: int) -> ProductModel:
    product = db.get(ProductModel, product_id)
    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Product with ID {product_id} not found",
        )
    return product


def _duplicate_response(existing: ProductModel) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={
            "detail": "Product with this name already exists",
            "product": Product.model_validate(existing).model_dump(mode="json"),
        },
    )


@router.get("", response_model=List[Product])
async def list_products(
    search: Optional[str] = Query(None, description="Case-insensitive name filter"),
    db: Session = Depends(get_db),
) -> List[Product]:
    """
    List products ordered by name.

    With ``search``, only names containing the term are returned, at most 10.
    """
    query = db.query(ProductModel).order_by(ProductModel.name)

    term = (search or "").strip()
    if term:
        query = query.filter(
            ProductModel.name.ilike(f"%{_escape_like(term)}%", escape="\\")
        ).limit(SEARCH_RESULT_LIMIT)

    return [Product.model_validate(product) for product in query.all()]


@router.post("", response_model=Product, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.rate_limit_write_endpoints)
async def create_product(
    request: Request,
    payload: ProductCreate,
    auth: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    """
    Add a product to the catalog.

    Names are unique regardless of case; a clash returns 409 with the
    existing product so clients can reuse it.
    """
    name = payload.name.strip()
    if not name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Product name is required",
        )

    existing = _find_by_name(db, name)
    if existing:
        return _duplicate_response(existing)

    product = ProductModel(**payload.model_dump(exclude={"name"}), name=name)
    db.add(product)
    db.commit()
    db.refresh(product)
    return Product.model_validate(product)


@router.get("/{product_id}", response_model=Product)
async def get_product(product_id: int, db: Session = Depends(get_db)) -> Product:
    """Get a specific product by ID"""
    return Product.model_validate(_get_product_or_404(db, product_id))


@router.put("/{product_id}", response_model=Product)
@limiter.limit(settings.rate_limit_write_endpoints)
async def update_product(
    request: Request,
    product_id: int,
    payload: ProductUpdate,
    auth: AuthContext = Depends(require_auth),
    db: Session = Depends(get_db),
):
    """Update a product; renaming onto another product's name gives 409"""
    product = _get_product_or_404(db, product_id)

    changes = payload.model_dump(exclude_unset=True)
    if "name" in changes:
        name = (changes["name"] or "").strip()
        if not name:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Product name is required",
            )
        existing = _find_by_name(db, name)
        if existing and existing.id != product.id:
            return _duplicate_response(existing)
        changes["name"] = name

    if changes.get("is_available", True) is None:
        del changes["is_available"]

    for field, value in changes.items():
        setattr(product, field, value)
    db.commit()
    db.refresh(product)
    return Product.model_validate(product)


@router.delete("/{product_id}", response_model=MessageResponse)
@limiter.limit(settings.rate_limit_write_endpoints)
async def delete_product(
    request: Request,
    product_id: int,
    auth: AuthContext = Depends(require_admin),
    db: Session = Depends(get_db),
):
    """
    Remove a product from the catalog.

    Refused with 409 and the number of referencing machines while any
    machine still lists the product.
    """
    product = _get_product_or_404(db, product_id)

    machine_count = (
        db.query(func.count(func.distinct(MachineProduct.machine_id)))
        .filter(MachineProduct.product_id == product.id)
        .scalar()
    )
    if machine_count:
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={
                "detail": f"Product is used by {machine_count} machine(s) and cannot be deleted",
                "machine_count": machine_count,
            },
        )

    db.delete(product)
    db.commit()
    return MessageResponse(message="Product deleted successfully")
