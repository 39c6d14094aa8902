"""
Order placement, lookup and status changes.

Placement writes the order header and its items in one transaction. The
header insert is retried with a fresh tracking code when the unique
constraint on ``orders.tracking_id`` rejects it.
"""
import logging
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from config import settings
from models.order import Order, OrderItem, OrderStatus
from models.product import Product
from schemas.order import (
    DashboardStats, DeliveryDetails, OrderItemOut, OrderPlaced, OrderResponse, OrderSummary
)
from services.cart import Cart
from services.errors import (
    EmptyCartError, OrderCreationError, OrderItemsCreationError, OrderNotFoundError,
    ProductsUnavailableError, StoreUnavailableError
)
from utils.tracking import generate_tracking_id

logger = logging.getLogger(__name__)


def format_contact(details: DeliveryDetails) -> str:
    return f"Email: {details.email}, Phone: {details.phone}"


def format_address(details: DeliveryDetails) -> str:
    return f"{details.address}, {details.city}, {details.zip_code}"


def find_unavailable(db: Session, cart: Cart) -> List[str]:
    """Names of cart products that no longer exist in the catalog."""
    missing = []
    try:
        for line in cart.items:
            product = db.query(Product).filter(Product.id == line.product.id).first()
            if not product:
                missing.append(line.product.name)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error checking cart products: %s", e)
        raise StoreUnavailableError() from e
    return missing


def _insert_header(db: Session, buyer_name: str, contact_information: str, delivery_address: str) -> Order:
    attempts = settings.TRACKING_CODE_MAX_ATTEMPTS
    for attempt in range(1, attempts + 1):
        order = Order(
            buyer_name=buyer_name,
            contact_information=contact_information,
            delivery_address=delivery_address,
            status=OrderStatus.PENDING,
            tracking_id=generate_tracking_id(),
        )
        db.add(order)
        try:
            db.flush()
            return order
        except IntegrityError as e:
            db.rollback()
            logger.warning("Order header rejected (attempt %d/%d), regenerating tracking code: %s",
                           attempt, attempts, e.orig)
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("Error creating order: %s", e)
            raise OrderCreationError() from e

    logger.error("Could not create order after %d tracking code attempts", attempts)
    raise OrderCreationError()


def place_order(db: Session, cart: Cart, details: DeliveryDetails) -> OrderPlaced:
    """
    Turn the cart into a persisted order.

    Raises EmptyCartError, ProductsUnavailableError, OrderCreationError,
    OrderItemsCreationError or StoreUnavailableError. The cart is cleared
    only after the order has been committed.
    """
    if cart.is_empty:
        raise EmptyCartError()

    missing = find_unavailable(db, cart)
    if missing:
        raise ProductsUnavailableError(missing)

    lines = cart.items
    order = _insert_header(
        db,
        buyer_name=details.name,
        contact_information=format_contact(details),
        delivery_address=format_address(details),
    )
    order_id, tracking_id = order.id, order.tracking_id

    try:
        db.add_all([
            OrderItem(
                order_id=order_id,
                product_id=line.product.id,
                quantity=line.quantity,
                price_at_purchase=line.product.price,
            )
            for line in lines
        ])
        db.flush()
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error creating order items for %s: %s", tracking_id, e)
        raise OrderItemsCreationError() from e

    logger.info("Order %s placed (%d items, tracking %s)", order_id, len(lines), tracking_id)

    try:
        cart.clear()
    except StoreUnavailableError:
        # The order is committed; a stale cart must not turn it into a failure
        logger.warning("Order %s placed but cart %s could not be cleared", order_id, cart.session_key)

    return OrderPlaced(order_id=order_id, tracking_id=tracking_id)


def _order_to_out(order: Order, rows: List[Tuple[OrderItem, Optional[Product]]]) -> OrderResponse:
    items: List[OrderItemOut] = []
    total = Decimal("0")
    for item, product in rows:
        line_total = item.price_at_purchase * item.quantity
        total += line_total
        items.append(OrderItemOut(
            id=item.id,
            product_id=item.product_id,
            product_name=product.name if product else None,
            product_image_url=product.image_url if product else None,
            product_description=product.description if product else None,
            quantity=item.quantity,
            price_at_purchase=item.price_at_purchase,
            line_total=line_total,
        ))
    summary = OrderSummary.model_validate(order)
    return OrderResponse(**summary.model_dump(), items=items, total=total)


def _load_order(db: Session, criterion, key) -> OrderResponse:
    try:
        order = db.query(Order).filter(criterion).first()
        if not order:
            raise OrderNotFoundError(key)
        rows = (
            db.query(OrderItem, Product)
            .outerjoin(Product, OrderItem.product_id == Product.id)
            .filter(OrderItem.order_id == order.id)
            .order_by(OrderItem.id)
            .all()
        )
    except SQLAlchemyError as e:
        logger.exception("Error fetching order %s: %s", key, e)
        raise StoreUnavailableError() from e
    return _order_to_out(order, rows)


def get_order_by_id(db: Session, order_id: int) -> OrderResponse:
    return _load_order(db, Order.id == order_id, order_id)


def get_order_by_tracking_id(db: Session, tracking_id: str) -> OrderResponse:
    return _load_order(db, Order.tracking_id == tracking_id.strip().upper(), tracking_id)


def update_order_status(db: Session, order_id: int, status: OrderStatus) -> Tuple[OrderStatus, Order]:
    """Overwrite the order status. Every transition is allowed, including going back."""
    try:
        order = db.query(Order).filter(Order.id == order_id).first()
        if not order:
            raise OrderNotFoundError(order_id)
        old_status = order.status
        order.status = status
        db.commit()
        db.refresh(order)
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Error updating order status for %s: %s", order_id, e)
        raise StoreUnavailableError() from e
    return old_status, order


def list_orders(db: Session, status: Optional[OrderStatus] = None, page: int = 1, page_size: int = 20):
    try:
        query = db.query(Order)
        if status is not None:
            query = query.filter(Order.status == status)
        query = query.order_by(Order.created_at.desc(), Order.id.desc())
        total = query.count()
        rows = query.offset((page - 1) * page_size).limit(page_size).all()
    except SQLAlchemyError as e:
        logger.exception("Error fetching orders: %s", e)
        raise StoreUnavailableError() from e
    return rows, total


def dashboard_stats(db: Session, recent: int = 5) -> DashboardStats:
    try:
        counts = dict(db.query(Order.status, func.count(Order.id)).group_by(Order.status).all())
        total_products = db.query(func.count(Product.id)).scalar() or 0
        recent_orders = (
            db.query(Order).order_by(Order.created_at.desc(), Order.id.desc()).limit(recent).all()
        )
    except SQLAlchemyError as e:
        logger.exception("Error computing dashboard stats: %s", e)
        raise StoreUnavailableError() from e

    by_status = {s: counts.get(s, 0) for s in OrderStatus}
    return DashboardStats(
        total_orders=sum(by_status.values()),
        by_status=by_status,
        total_products=total_products,
        recent_orders=[OrderSummary.model_validate(o) for o in recent_orders],
    )
