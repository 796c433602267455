# backend/seed_db.py
"""Create tables and a small catalogue for local development.

Usage: python seed_db.py
"""
import os
import sys
from decimal import Decimal

# Add 'backend' folder to Python path
sys.path.append(os.path.abspath(os.path.dirname(__file__)))

from database import SessionLocal, init_db
from models.book import Book
from models.users import User
from services.store_settings import update_store_settings
from utils.tokenJWT import create_access_token

BOOKS = [
    ("The Left Hand of Darkness", "Ursula K. Le Guin", "9780441478125", "24.99", "22.49", 5),
    ("Middlemarch", "George Eliot", "9780141439549", "18.00", "16.20", 3),
    ("The Overstory", "Richard Powers", "9780393356687", "27.50", "24.75", 1),
    ("Braiding Sweetgrass", "Robin Wall Kimmerer", "9781571313560", "32.00", "28.80", 8),
]

STAFF_EMAIL = "staff@bookshop.local"


def seed():
    init_db()
    session = SessionLocal()
    try:
        for title, author, isbn, sell, member, stock in BOOKS:
            if session.query(Book).filter(Book.isbn == isbn).first():
                continue
            session.add(Book(
                title=title, author=author, isbn=isbn,
                sell_price=Decimal(sell), member_price=Decimal(member),
                currency="AUD", stock_quantity=stock,
            ))

        if not session.query(User).filter(User.email == STAFF_EMAIL).first():
            session.add(User(email=STAFF_EMAIL, role="ADMIN", first_name="Shop", last_name="Staff"))
        session.commit()

        update_store_settings(session, ordering_enabled=True)
        print(f"Seeded {session.query(Book).count()} books.")
        print(f"Staff token: {create_access_token({'sub': STAFF_EMAIL, 'role': 'ADMIN'})}")
    finally:
        session.close()


if __name__ == "__main__":
    seed()
