# backend/routes/admin.py
from typing import Literal
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from database import get_db
from models.order import OrderStatus
from models.users import User
from schemas.order import DashboardStats, OrderResponse, OrdersPage, OrderStatusPatch
from services import orders as order_service
from services.errors import OrderNotFoundError, StoreUnavailableError
from utils.audit import write_log, client_ip
from utils.tokenJWT import require_admin

router = APIRouter(prefix="/admin", tags=["Admin"])


# Order counts per status plus the most recent orders
@router.get("/dashboard", response_model=DashboardStats)
def get_dashboard(
    recent: int = Query(5, ge=1, le=50),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    try:
        return order_service.dashboard_stats(db, recent=recent)
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


# List orders, newest first, optionally filtered by status
@router.get("/orders", response_model=OrdersPage)
def list_orders(
    status: Literal["all", "pending", "in_progress", "delivered"] = Query("all"),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    wanted = None if status == "all" else OrderStatus(status)
    try:
        rows, total = order_service.list_orders(db, status=wanted, page=page, page_size=page_size)
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return {"items": rows, "total": total, "page": page, "page_size": page_size}


@router.get("/orders/{order_id}", response_model=OrderResponse)
def get_order_detail(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    try:
        return order_service.get_order_by_id(db, order_id)
    except OrderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))


# Set order status; any status may follow any other
@router.patch("/orders/{order_id}/status", response_model=OrderResponse)
def update_order_status(
    order_id: int,
    payload: OrderStatusPatch,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_admin),
):
    try:
        old_status, order = order_service.update_order_status(db, order_id, payload.status)
    except OrderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))

    write_log(db, user_id=current_user.id, action="ORDER_STATUS_CHANGE", resource="orders", status="SUCCESS",
              ip=client_ip(request), meta={"order_id": order_id, "old": old_status.value, "new": payload.status.value})

    try:
        return order_service.get_order_by_id(db, order_id)
    except OrderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StoreUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
