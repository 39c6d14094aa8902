from sqlalchemy import Column, String, Text, DateTime, func
from database import Base

# Durable key-value slot holding a buyer's serialized cart.
# The payload is opaque to the database, the cart service owns its format.
class CartSlot(Base):
    __tablename__ = "cart_slots"

    session_key = Column(String(64), primary_key=True) # Buyer cart session key
    payload = Column(Text, nullable=False, default="[]") # JSON list of cart lines
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
