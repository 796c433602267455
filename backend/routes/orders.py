# backend/routes/orders.py
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Request, Query
from sqlalchemy.orm import Session

from database import get_db
from models.sale import Sale, SaleStatus
from models.users import User
from schemas.order import (
    OrderResponse, OrdersPage, OrderStatusPatch, OrderCancelPayload, SaleItemOut, StatusHistoryOut
)
from services import order_management
from services.errors import CheckoutError
from utils.audit import write_log, client_ip
from utils.http_errors import to_http_exception
from utils.tokenJWT import get_current_user, is_staff, role_required

router = APIRouter(prefix="/orders", tags=["Orders"])

# Map Sale model to OrderResponse schema
def _order_to_out(sale: Sale) -> OrderResponse:
    items: List[SaleItemOut] = []
    for it in sale.items:
        items.append(SaleItemOut(
            book_id=it.book_id,
            title=it.book.title if it.book else "Removed book",
            quantity=it.quantity,
            unit_price=it.unit_price,
            line_total=it.line_total,
            price_type=it.price_type,
        ))
    return OrderResponse(
        id=sale.id,
        status=sale.status,
        sale_date=sale.sale_date,
        subtotal=sale.subtotal,
        tax_amount=sale.tax_amount,
        total_amount=sale.total_amount,
        currency=sale.currency,
        payment_method=sale.payment_method,
        payment_receipt_url=sale.payment_receipt_url,
        customer_email=sale.customer_email,
        customer_name=sale.customer_name,
        cancellation_reason=sale.cancellation_reason,
        items=items,
        status_history=[StatusHistoryOut.model_validate(h) for h in sale.status_history],
    )

def _owns(user: User, sale: Sale) -> bool:
    return sale.customer_id == user.id or (sale.customer_email is not None and sale.customer_email == user.email)

def _get_visible_order(db: Session, order_id: int, user: User) -> Sale:
    try:
        sale = order_management.get_order(db, order_id)
    except CheckoutError as e:
        raise to_http_exception(e)
    if not (_owns(user, sale) or is_staff(user)):
        raise HTTPException(status_code=404, detail="Order not found or forbidden")
    return sale

# List the current customer's orders
@router.get("", response_model=OrdersPage)
def list_my_orders(
    status: Optional[SaleStatus] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    rows, total = order_management.get_customer_orders(
        db, customer_id=current_user.id, customer_email=current_user.email,
        status=status, page=page, page_size=page_size,
    )
    return {"items": [_order_to_out(o) for o in rows], "total": total, "page": page, "page_size": page_size}

# Get details of a specific order
@router.get("/{order_id}", response_model=OrderResponse)
def get_order_detail(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return _order_to_out(_get_visible_order(db, order_id, current_user))

# Manually update order status (staff only)
@router.patch("/{order_id}/status", response_model=OrderResponse)
def update_order_status(
    order_id: int,
    payload: OrderStatusPatch,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("ADMIN", "STAFF"))
):
    try:
        old_status = order_management.get_order(db, order_id).status
        sale = order_management.update_order_status(
            db, order_id, payload.status, note=payload.note, user_id=current_user.id
        )
    except CheckoutError as e:
        raise to_http_exception(e)

    write_log(db, user_id=current_user.id, action="ORDER_STATUS_CHANGE", resource="sales", status="SUCCESS",
        ip=client_ip(request), meta={"sale_id": order_id, "old": old_status.value, "new": payload.status.value})
    return _order_to_out(order_management.get_order(db, sale.id))

# Cancel an order; customers may cancel their own, staff any
@router.post("/{order_id}/cancel", response_model=OrderResponse)
def cancel_order(
    order_id: int,
    payload: OrderCancelPayload,
    request: Request,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    _get_visible_order(db, order_id, current_user)
    try:
        sale = order_management.cancel_order(
            db, order_id, payload.reason, user_id=current_user.id, restore=payload.restore_stock
        )
    except CheckoutError as e:
        raise to_http_exception(e)

    write_log(db, user_id=current_user.id, action="ORDER_CANCEL", resource="sales", status="SUCCESS",
        ip=client_ip(request), meta={"sale_id": order_id, "restore_stock": payload.restore_stock})
    return _order_to_out(order_management.get_order(db, sale.id))
