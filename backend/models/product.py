import enum
from sqlalchemy import Column, Integer, String, Numeric, DateTime, Enum, CheckConstraint, func
from database import Base

# Catalog categories shown as filters in the shop
class ProductCategory(str, enum.Enum):
    VEGETABLE = "vegetable"
    FRUIT = "fruit"

# Model Product
# A single produce item offered in bulk. Price is per kilogram.
# Availability is not tracked, a product is orderable while its row exists.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)

    price = Column(Numeric(10, 2), CheckConstraint("price >= 0"), nullable=False)
    image_url = Column(String, nullable=False, default="")
    description = Column(String, nullable=False, default="")
    category = Column(
        Enum(ProductCategory, values_callable=lambda e: [m.value for m in e], native_enum=False),
        nullable=False,
        index=True,
    )

    created_at = Column(DateTime(timezone=True), server_default=func.now())
