# backend/routes/orders.py
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy.orm import Session
import logging

from config import settings
from database import get_db
from routes.cart import cart_session_key, open_cart
from schemas.order import DeliveryDetails, OrderPlaced, OrderResponse
from services import orders as order_service
from services.errors import (
    EmptyCartError, OrderCreationError, OrderItemsCreationError, OrderNotFoundError,
    ProductsUnavailableError, StoreUnavailableError
)
from utils.audit import write_log, client_ip

router = APIRouter(prefix="/orders", tags=["Orders"])
logger = logging.getLogger(__name__)


# Place an order from the buyer's cart
@router.post("", response_model=OrderPlaced, status_code=status.HTTP_201_CREATED)
def checkout(
    details: DeliveryDetails,
    request: Request,
    response: Response,
    key: str = Depends(cart_session_key),
    db: Session = Depends(get_db),
):
    cart = open_cart(db, key)
    response.headers[settings.CART_SESSION_HEADER] = key

    try:
        placed = order_service.place_order(db, cart, details)
    except EmptyCartError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ProductsUnavailableError as e:
        raise HTTPException(status_code=409, detail={"message": str(e), "unavailable": e.names})
    except (OrderCreationError, OrderItemsCreationError) as e:
        write_log(db, user_id=None, action="ORDER_PLACE", resource="orders", status="FAIL",
                  ip=client_ip(request), meta={"reason": type(e).__name__})
        raise HTTPException(status_code=500, detail=str(e))
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))

    write_log(db, user_id=None, action="ORDER_PLACE", resource="orders", status="SUCCESS",
              ip=client_ip(request), meta={"order_id": placed.order_id, "tracking_id": placed.tracking_id})
    return placed


# Buyer-facing lookup by tracking code, no authentication
@router.get("/track/{tracking_id}", response_model=OrderResponse)
def track_order(tracking_id: str, db: Session = Depends(get_db)):
    try:
        return order_service.get_order_by_tracking_id(db, tracking_id)
    except OrderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
