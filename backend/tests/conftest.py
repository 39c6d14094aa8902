"""
Pytest configuration and fixtures for HarvestHub tests.
"""
import os

# Set test environment before importing app modules
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key-for-unit-tests-only"

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import Base, get_db
from main import app
from models.order import Order, OrderItem, OrderStatus
from models.product import Product, ProductCategory
from models.users import User
from utils.hashing import get_password_hash

ADMIN_EMAIL = "admin@harvesthub.com"
ADMIN_PASSWORD = "fresh-produce-42"

DELIVERY = {
    "name": "Jane Miller",
    "email": "jane.miller@farmmail.com",
    "phone": "555-0142",
    "address": "12 Orchard Lane",
    "city": "Springfield",
    "zip_code": "49001",
    "notes": "Leave at the back door",
}


@pytest.fixture
def engine():
    """In-memory SQLite shared by every session of one test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def apples(db) -> Product:
    product = Product(
        name="Red Apples",
        price=Decimal("2.99"),
        category=ProductCategory.FRUIT,
        image_url="https://images.example.org/apples.jpeg",
        description="Crisp apples picked at peak ripeness.",
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


@pytest.fixture
def carrots(db) -> Product:
    product = Product(
        name="Organic Carrots",
        price=Decimal("1.49"),
        category=ProductCategory.VEGETABLE,
        image_url="https://images.example.org/carrots.jpeg",
        description="Crunchy, sweet carrots grown without pesticides.",
    )
    db.add(product)
    db.commit()
    db.refresh(product)
    return product


@pytest.fixture
def admin_user(db) -> User:
    user = User(email=ADMIN_EMAIL, password_hash=get_password_hash(ADMIN_PASSWORD), role="admin")
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def admin_headers(client, admin_user) -> dict:
    resp = client.post("/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert resp.status_code == 200, resp.text
    return {"Authorization": f"Bearer {resp.json()['access_token']}"}


@pytest.fixture
def make_order(db):
    """Insert an order directly, bypassing checkout."""
    counter = {"n": 0}

    def _make(items, status=OrderStatus.PENDING, buyer_name="Sam Green"):
        counter["n"] += 1
        order = Order(
            buyer_name=buyer_name,
            contact_information="Email: sam@farmmail.com, Phone: 555-0100",
            delivery_address="1 Field Road, Greenville, 10001",
            status=status,
            tracking_id=f"HH-TEST{counter['n']:03d}",
        )
        db.add(order)
        db.flush()
        for product, quantity in items:
            db.add(OrderItem(
                order_id=order.id,
                product_id=product.id,
                quantity=quantity,
                price_at_purchase=product.price,
            ))
        db.commit()
        db.refresh(order)
        return order

    return _make
