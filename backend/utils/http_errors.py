# backend/utils/http_errors.py
from fastapi import HTTPException, status

from services import errors

_STATUS_BY_CODE = {
    errors.BookNotFound.code: status.HTTP_404_NOT_FOUND,
    errors.OrderNotFound.code: status.HTTP_404_NOT_FOUND,
    errors.ItemNotInCart.code: status.HTTP_404_NOT_FOUND,
    errors.InquiryNotFound.code: status.HTTP_404_NOT_FOUND,
    errors.InquiriesClosed.code: status.HTTP_403_FORBIDDEN,
    errors.ConcurrentModification.code: status.HTTP_409_CONFLICT,
    errors.PaymentAlreadyUsed.code: status.HTTP_409_CONFLICT,
    errors.InvalidStatusTransition.code: status.HTTP_409_CONFLICT,
    errors.OrderingDisabled.code: status.HTTP_503_SERVICE_UNAVAILABLE,
    errors.OrderFailed.code: status.HTTP_500_INTERNAL_SERVER_ERROR,
    errors.InquiryFailed.code: status.HTTP_500_INTERNAL_SERVER_ERROR,
}

def status_for(code) -> int:
    # Everything else is a problem with the customer's cart or payment
    return _STATUS_BY_CODE.get(code, status.HTTP_400_BAD_REQUEST)

def to_http_exception(e: errors.CheckoutError) -> HTTPException:
    return HTTPException(status_code=status_for(e.code), detail=e.message)
