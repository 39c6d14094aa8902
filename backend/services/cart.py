"""
Buyer cart: a list of (product snapshot, quantity) lines kept in a durable slot.

The line list is written back to the slot after every mutation and read once
when the cart is opened. Totals are always derived from the current lines.
"""
import logging
from decimal import Decimal
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.cart import CartSlot
from schemas.cart import CartLine, CartOut
from schemas.product import ProductOut
from services.errors import StoreUnavailableError

logger = logging.getLogger(__name__)

_LINES = TypeAdapter(List[CartLine])


class CartStore:
    """Key-value slot interface used by :class:`Cart`."""

    def load(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def save(self, key: str, payload: str) -> None:
        raise NotImplementedError


class DbCartStore(CartStore):
    """Cart slots stored in the ``cart_slots`` table."""

    def __init__(self, db: Session):
        self.db = db

    def load(self, key: str) -> Optional[str]:
        try:
            slot = self.db.query(CartSlot).filter(CartSlot.session_key == key).first()
        except SQLAlchemyError as e:
            logger.exception("Failed to read cart slot %s: %s", key, e)
            raise StoreUnavailableError() from e
        return slot.payload if slot else None

    def save(self, key: str, payload: str) -> None:
        try:
            slot = self.db.query(CartSlot).filter(CartSlot.session_key == key).first()
            if slot:
                slot.payload = payload
            else:
                self.db.add(CartSlot(session_key=key, payload=payload))
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("Failed to write cart slot %s: %s", key, e)
            raise StoreUnavailableError() from e


class Cart:
    def __init__(self, session_key: str, store: CartStore):
        self.session_key = session_key
        self._store = store
        self._lines: List[CartLine] = []

    @classmethod
    def open(cls, session_key: str, store: CartStore) -> "Cart":
        """Load the cart stored under ``session_key``; unreadable content yields an empty cart."""
        cart = cls(session_key, store)
        cart._lines = cart._rehydrate()
        return cart

    def _rehydrate(self) -> List[CartLine]:
        raw = self._store.load(self.session_key)
        if not raw:
            return []
        try:
            lines = _LINES.validate_json(raw)
        except ValidationError as e:
            logger.warning("Failed to parse saved cart %s, starting empty: %s", self.session_key, e)
            return []

        # At most one line per product
        ids = [line.product.id for line in lines]
        if len(ids) != len(set(ids)):
            logger.warning("Saved cart %s repeats a product, starting empty", self.session_key)
            return []
        return lines

    def _persist(self) -> None:
        self._store.save(self.session_key, _LINES.dump_json(self._lines).decode())

    def _find(self, product_id: int) -> Optional[CartLine]:
        for line in self._lines:
            if line.product.id == product_id:
                return line
        return None

    @property
    def items(self) -> List[CartLine]:
        return list(self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def total_items(self) -> int:
        return sum(line.quantity for line in self._lines)

    @property
    def subtotal(self) -> Decimal:
        return sum((line.product.price * line.quantity for line in self._lines), Decimal("0"))

    def add_item(self, product: ProductOut, quantity: int = 1) -> None:
        if quantity < 1:
            raise ValueError("quantity must be at least 1")
        line = self._find(product.id)
        if line:
            line.quantity += quantity
        else:
            self._lines.append(CartLine(product=product, quantity=quantity))
        self._persist()

    def update_quantity(self, product_id: int, quantity: int) -> None:
        if quantity <= 0:
            self.remove_item(product_id)
            return
        line = self._find(product_id)
        if line:
            line.quantity = quantity
            self._persist()

    def remove_item(self, product_id: int) -> None:
        remaining = [line for line in self._lines if line.product.id != product_id]
        if len(remaining) != len(self._lines):
            self._lines = remaining
            self._persist()

    def clear(self) -> None:
        self._lines = []
        self._persist()

    def to_out(self) -> CartOut:
        return CartOut(
            session_id=self.session_key,
            items=self.items,
            total_items=self.total_items,
            subtotal=self.subtotal,
        )
