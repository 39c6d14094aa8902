# backend/routes/products.py
from typing import Optional, List
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging

from database import get_db
from models.product import Product, ProductCategory
from models.users import User
import schemas.product as product_schemas
from utils.audit import write_log, client_ip
from utils.tokenJWT import require_admin

router = APIRouter(prefix="/admin", tags=["Products"])
logger = logging.getLogger(__name__)

STORE_ERROR = "Something went wrong. Please try again later."

# ---- HELPERS ----
def _get_or_404(db: Session, product_id: int) -> Product:
    try:
        product = db.query(Product).filter(Product.id == product_id).first()
    except SQLAlchemyError as e:
        logger.exception("Error fetching product %s: %s", product_id, e)
        raise HTTPException(status_code=503, detail=STORE_ERROR)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product

def _commit(db: Session, what: str):
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error %s product: %s", what, e)
        raise HTTPException(status_code=503, detail=STORE_ERROR)


# =========================
# PRODUCT LIST
# =========================
@router.get("/products", response_model=product_schemas.ProductListPage)
def list_products(
    name: Optional[str] = Query(None),
    category: Optional[ProductCategory] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=500),
    sort_by: str = Query("id"),
    order: str = Query("asc", pattern="^(asc|desc)$"),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    query = db.query(Product)

    if name: query = query.filter(Product.name.ilike(f"%{name}%"))
    if category: query = query.filter(Product.category == category)

    allowed = {
        "id": Product.id, "name": Product.name,
        "price": Product.price, "created_at": Product.created_at,
    }
    sort_col = allowed.get(sort_by.lower(), Product.id)
    query = query.order_by(sort_col.asc() if order == "asc" else sort_col.desc())

    try:
        total = query.count()
        items: List[Product] = query.offset((page - 1) * page_size).limit(page_size).all()
    except SQLAlchemyError as e:
        logger.exception("Error fetching products: %s", e)
        raise HTTPException(status_code=503, detail=STORE_ERROR)

    return {"items": items, "total": total, "page": page, "page_size": page_size}


# =========================
# CREATE
# =========================
@router.post("/products", response_model=product_schemas.ProductOut, status_code=status.HTTP_201_CREATED)
def add_product(
    payload: product_schemas.ProductCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    new_product = Product(**payload.model_dump())
    db.add(new_product)
    _commit(db, "creating")
    db.refresh(new_product)

    write_log(
        db, user_id=current_user.id, action="PRODUCT_CREATE", resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"id": new_product.id, "name": new_product.name}
    )
    return new_product


# =========================
# PARTIAL UPDATE
# =========================
@router.patch("/products/{product_id}", response_model=product_schemas.ProductOut)
def edit_product(
    product_id: int,
    payload: product_schemas.ProductEditRequest,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    product = _get_or_404(db, product_id)

    changes = payload.model_dump(exclude_unset=True, exclude_none=True)
    for key, value in changes.items():
        setattr(product, key, value)

    _commit(db, "updating")
    db.refresh(product)

    write_log(
        db, user_id=current_user.id, action="PRODUCT_EDIT", resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"id": product.id, "fields": sorted(changes)}
    )
    return product


# =========================
# DELETE
# =========================
# Past order items keep their frozen quantity and price
@router.delete("/products/{product_id}")
def delete_product(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    product = _get_or_404(db, product_id)
    pid, pname = product.id, product.name
    db.delete(product)
    _commit(db, "deleting")

    write_log(
        db, user_id=current_user.id, action="PRODUCT_DELETE", resource="products",
        status="SUCCESS", ip=client_ip(request), meta={"id": pid, "name": pname}
    )
    return {"message": f"Product {pname} deleted", "id": pid}
