# backend/routes/cart.py
import uuid
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Header, Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from config import settings
from database import get_db
from models.product import Product
from schemas.cart import CartAddItem, CartUpdateItem, CartOut
from schemas.product import ProductOut
from services.cart import Cart, DbCartStore
from services.errors import StoreUnavailableError

router = APIRouter(prefix="/cart", tags=["Cart"])
logger = logging.getLogger(__name__)

# Buyer cart session key from the request header; a new one is issued when missing
def cart_session_key(
    x_cart_session: Optional[str] = Header(None, alias=settings.CART_SESSION_HEADER),
) -> str:
    key = (x_cart_session or "").strip()
    if not key:
        return uuid.uuid4().hex
    if len(key) > 64:
        raise HTTPException(status_code=400, detail="Invalid cart session")
    return key

def open_cart(db: Session, key: str) -> Cart:
    try:
        return Cart.open(key, DbCartStore(db))
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))

def _respond(cart: Cart, response: Response) -> CartOut:
    response.headers[settings.CART_SESSION_HEADER] = cart.session_key
    return cart.to_out()

@router.get("", response_model=CartOut)
def get_cart(response: Response, key: str = Depends(cart_session_key), db: Session = Depends(get_db)):
    return _respond(open_cart(db, key), response)

@router.post("/add", response_model=CartOut)
def add_to_cart(
    payload: CartAddItem,
    response: Response,
    key: str = Depends(cart_session_key),
    db: Session = Depends(get_db),
):
    cart = open_cart(db, key)
    try:
        product = db.query(Product).filter(Product.id == payload.product_id).first()
    except SQLAlchemyError as e:
        logger.exception("Error fetching product %s: %s", payload.product_id, e)
        raise HTTPException(status_code=503, detail="Something went wrong. Please try again later.")
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    try:
        # The snapshot carries the price the buyer saw; checkout charges this price
        cart.add_item(ProductOut.model_validate(product), payload.quantity)
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return _respond(cart, response)

@router.put("/items/{product_id}", response_model=CartOut)
def update_cart_item(
    product_id: int,
    payload: CartUpdateItem,
    response: Response,
    key: str = Depends(cart_session_key),
    db: Session = Depends(get_db),
):
    cart = open_cart(db, key)
    try:
        cart.update_quantity(product_id, payload.quantity)
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return _respond(cart, response)

@router.delete("/items/{product_id}", response_model=CartOut)
def delete_cart_item(
    product_id: int,
    response: Response,
    key: str = Depends(cart_session_key),
    db: Session = Depends(get_db),
):
    cart = open_cart(db, key)
    try:
        cart.remove_item(product_id)
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return _respond(cart, response)

@router.delete("", response_model=CartOut)
def clear_cart(response: Response, key: str = Depends(cart_session_key), db: Session = Depends(get_db)):
    cart = open_cart(db, key)
    try:
        cart.clear()
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return _respond(cart, response)
