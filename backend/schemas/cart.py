from decimal import Decimal
from pydantic import BaseModel, Field
from typing import List

from schemas.product import ProductOut

# A product captured into the cart together with the price shown at that moment
class CartLine(BaseModel):
    product: ProductOut
    quantity: int = Field(ge=1)

# Request schema for adding an item to the cart
class CartAddItem(BaseModel):
    product_id: int
    quantity: int = Field(default=1, ge=1)

# Request schema for setting a line quantity; zero or less removes the line
class CartUpdateItem(BaseModel):
    quantity: int

# Response schema for the entire cart summary
class CartOut(BaseModel):
    session_id: str
    items: List[CartLine]
    total_items: int
    subtotal: Decimal
