# backend/services/cart.py
"""Cart mutations. The cart itself lives in the client's cookie; these
functions take a Cart, check it against the catalog and return the new Cart."""
from decimal import Decimal

from sqlalchemy.orm import Session

from models.book import Book
from schemas.cart import Cart, CartItem, CartItemOut, CartOut, MAX_CART_ITEMS, MAX_ITEM_QUANTITY
from services.cart_validation import live_price
from services.errors import BookNotFound, CartLimitExceeded, InsufficientStock, ItemNotInCart
from services.tax import to_money

DEFAULT_CURRENCY = "AUD"


def _get_book(db: Session, book_id: int) -> Book:
    book = db.get(Book, book_id)
    if book is None:
        raise BookNotFound()
    return book


def _check_quantity(quantity: int, book: Book):
    if quantity > book.stock_quantity:
        raise InsufficientStock(f"Only {book.stock_quantity} items available in stock")
    if quantity > MAX_ITEM_QUANTITY:
        raise CartLimitExceeded(f"Maximum quantity per item is {MAX_ITEM_QUANTITY}")


def add_to_cart(db: Session, cart: Cart, book_id: int, quantity: int = 1, is_member_price: bool = False) -> Cart:
    book = _get_book(db, book_id)
    cart = cart.model_copy(deep=True)

    existing = cart.find(book_id)
    if existing:
        # Keeps the price captured on first add
        new_quantity = existing.quantity + quantity
        _check_quantity(new_quantity, book)
        existing.quantity = new_quantity
        return cart

    _check_quantity(quantity, book)
    if len(cart.items) >= MAX_CART_ITEMS:
        raise CartLimitExceeded(f"Cart cannot exceed {MAX_CART_ITEMS} items")

    cart.items.append(CartItem(
        book_id=book.id,
        quantity=quantity,
        price_at_add=to_money(live_price(book, is_member_price)),
        currency=book.currency,
        is_member_price=is_member_price,
    ))
    return cart


def update_quantity(db: Session, cart: Cart, book_id: int, quantity: int) -> Cart:
    if quantity < 1:
        raise CartLimitExceeded("Quantity must be at least 1")
    book = _get_book(db, book_id)
    _check_quantity(quantity, book)

    cart = cart.model_copy(deep=True)
    item = cart.find(book_id)
    if item is None:
        raise ItemNotInCart()
    item.quantity = quantity
    return cart


def remove_from_cart(cart: Cart, book_id: int) -> Cart:
    cart = cart.model_copy(deep=True)
    cart.items = [it for it in cart.items if it.book_id != book_id]
    return cart


def populate_cart(db: Session, cart: Cart) -> CartOut:
    # Lines whose book vanished are left out of the view (checkout reports them)
    books = {}
    if cart.items:
        ids = [it.book_id for it in cart.items]
        books = {b.id: b for b in db.query(Book).filter(Book.id.in_(ids)).all()}

    items_out, subtotal = [], Decimal("0.00")
    for it in cart.items:
        book = books.get(it.book_id)
        if book is None:
            continue
        line_total = to_money(it.price_at_add * it.quantity)
        subtotal += line_total
        items_out.append(CartItemOut(
            book_id=book.id,
            title=book.title,
            author=book.author,
            quantity=it.quantity,
            price_at_add=it.price_at_add,
            currency=it.currency,
            is_member_price=it.is_member_price,
            stock_quantity=book.stock_quantity,
            line_total=line_total,
        ))

    return CartOut(
        items=items_out,
        item_count=sum(it.quantity for it in items_out),
        subtotal=subtotal,
        currency=items_out[0].currency if items_out else DEFAULT_CURRENCY,
        created_at=cart.created_at,
        expires_at=cart.expires_at,
    )
