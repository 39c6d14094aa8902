from typing import Optional, List, Literal
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import logging

from database import get_db
from models.product import Product, ProductCategory
from schemas.product import ProductOut, ProductListPage

router = APIRouter(
    prefix="/shop",
    tags=["Shop"]
)
logger = logging.getLogger(__name__)

# Categories offered as catalog filters
@router.get("/categories", response_model=List[str])
def get_categories():
    return [c.value for c in ProductCategory]

@router.get("/products", response_model=ProductListPage)
def list_products_for_shop(
    category: Literal["all", "vegetable", "fruit"] = Query("all", description="Filter by category"),
    q: Optional[str] = Query(None, description="Search by name"),
    page: int = Query(1, ge=1),
    page_size: int = Query(24, ge=1, le=100),
    sort_by: Literal["name", "price", "created_at"] = "name",
    order: Literal["asc", "desc"] = "asc",
    db: Session = Depends(get_db),
):
    query = db.query(Product)

    if category != "all":
        query = query.filter(Product.category == ProductCategory(category))
    if q:
        query = query.filter(Product.name.ilike(f"%{q}%"))

    allowed = {
        "name": Product.name,
        "price": Product.price,
        "created_at": Product.created_at,
    }
    sort_col = allowed.get(sort_by, Product.name)
    query = query.order_by(sort_col.desc() if order == "desc" else sort_col.asc(), Product.id.asc())

    try:
        total = query.count()
        items: List[Product] = query.offset((page - 1) * page_size).limit(page_size).all()
    except SQLAlchemyError as e:
        logger.exception("Error fetching products: %s", e)
        raise HTTPException(status_code=503, detail="Could not load products. Please try again later.")

    return {"items": items, "total": total, "page": page, "page_size": page_size}

@router.get("/products/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    try:
        product = db.query(Product).filter(Product.id == product_id).first()
    except SQLAlchemyError as e:
        logger.exception("Error fetching product %s: %s", product_id, e)
        raise HTTPException(status_code=503, detail="Could not load product. Please try again later.")
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product
