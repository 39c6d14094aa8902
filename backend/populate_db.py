"""
Seed the HarvestHub database with the sample produce catalog and an admin account.

Usage:
    python populate_db.py [--reset]

The admin account is taken from ADMIN_EMAIL / ADMIN_PASSWORD.
"""
import argparse
import logging
import os
import sys
from decimal import Decimal

from dotenv import load_dotenv

# Add 'backend' folder to Python path
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

from database import SessionLocal, init_db
from models.product import Product, ProductCategory
from models.users import User
from utils.hashing import get_password_hash

load_dotenv()
logger = logging.getLogger("populate_db")

PEXELS = "https://images.pexels.com/photos/{}/pexels-photo-{}.jpeg"

# name, price per kg, category, pexels photo id, description
CATALOG = [
    ("Organic Carrots", "1.49", ProductCategory.VEGETABLE, 143133,
     "Crunchy, sweet carrots grown without pesticides."),
    ("Fresh Tomatoes", "2.49", ProductCategory.VEGETABLE, 533280,
     "Vine-ripened tomatoes, ideal for sauces and salads."),
    ("Red Potatoes", "0.99", ProductCategory.VEGETABLE, 144248,
     "Waxy red potatoes that hold their shape when boiled."),
    ("Broccoli", "2.19", ProductCategory.VEGETABLE, 47347,
     "Tight green florets harvested this week."),
    ("Red Apples", "2.99", ProductCategory.FRUIT, 102104,
     "Crisp apples picked at peak ripeness."),
    ("Bananas", "1.29", ProductCategory.FRUIT, 1093038,
     "Ripe yellow bananas, sold by the kilogram."),
    ("Oranges", "1.99", ProductCategory.FRUIT, 161559,
     "Juicy navel oranges, easy to peel."),
    ("Strawberries", "4.99", ProductCategory.FRUIT, 46174,
     "Sweet strawberries from local growers."),
]


def seed_products(session, reset: bool = False) -> int:
    if reset:
        session.query(Product).delete()
        session.commit()

    existing = {name for (name,) in session.query(Product.name).all()}
    added = 0
    for name, price, category, photo, description in CATALOG:
        if name in existing:
            continue
        session.add(Product(
            name=name,
            price=Decimal(price),
            category=category,
            image_url=PEXELS.format(photo, photo),
            description=description,
        ))
        added += 1
    session.commit()
    return added


def seed_admin(session) -> bool:
    email = os.getenv("ADMIN_EMAIL")
    password = os.getenv("ADMIN_PASSWORD")
    if not email or not password:
        logger.warning("ADMIN_EMAIL / ADMIN_PASSWORD not set, skipping admin account")
        return False

    email = email.strip().lower()
    if session.query(User).filter(User.email == email).first():
        return False
    session.add(User(email=email, password_hash=get_password_hash(password), role="admin"))
    session.commit()
    return True


def populate_database(reset: bool = False):
    """Main execution function to populate database."""
    init_db()
    session = SessionLocal()
    try:
        added = seed_products(session, reset=reset)
        logger.info("Added %d products", added)
        if seed_admin(session):
            logger.info("Created admin account")
    finally:
        session.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    parser = argparse.ArgumentParser(description="Seed the HarvestHub database")
    parser.add_argument("--reset", action="store_true", help="Delete existing products first")
    args = parser.parse_args()
    populate_database(reset=args.reset)
