from decimal import Decimal
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Dict, List, Optional
from datetime import datetime

from models.order import OrderStatus


# Delivery details submitted at checkout
class DeliveryDetails(BaseModel):
    name: str = Field(min_length=1)
    email: EmailStr
    phone: str = Field(min_length=1)
    address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    zip_code: str = Field(min_length=1)
    notes: Optional[str] = None

    @field_validator("name", "phone", "address", "city", "zip_code")
    @classmethod
    def _not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("This field is required")
        return v


# Result of a successful checkout
class OrderPlaced(BaseModel):
    order_id: int
    tracking_id: str


# Output schema for an individual order line item
class OrderItemOut(BaseModel):
    id: int
    product_id: Optional[int] = None
    # Current catalog data, None once the product is gone
    product_name: Optional[str] = None
    product_image_url: Optional[str] = None
    product_description: Optional[str] = None
    quantity: int
    price_at_purchase: Decimal
    line_total: Decimal


# Order header without items, used in listings
class OrderSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    buyer_name: str
    contact_information: str
    delivery_address: str
    status: OrderStatus
    created_at: Optional[datetime] = None
    tracking_id: str


# Output schema representing the full order details
class OrderResponse(OrderSummary):
    items: List[OrderItemOut]
    total: Decimal


# Schema for paginated order lists
class OrdersPage(BaseModel):
    items: List[OrderSummary]
    total: int
    page: int
    page_size: int


# Schema for updating order status
class OrderStatusPatch(BaseModel):
    status: OrderStatus


# Aggregates shown on the admin dashboard
class DashboardStats(BaseModel):
    total_orders: int
    by_status: Dict[OrderStatus, int]
    total_products: int
    recent_orders: List[OrderSummary]
