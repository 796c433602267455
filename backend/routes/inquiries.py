from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from database import get_db
from models.inquiry import InquiryStatus
from models.users import User
from schemas.inquiry import InquiryOut, InquiryUpdate
from services import inquiry as inquiry_service
from services.errors import CheckoutError
from utils.audit import write_log
from utils.http_errors import to_http_exception
from utils.tokenJWT import role_required

router = APIRouter(prefix="/inquiries", tags=["Inquiries"])

# List inquiries for follow-up (staff only)
@router.get("")
def list_inquiries(
    status: Optional[InquiryStatus] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("ADMIN", "STAFF")),
):
    rows, total = inquiry_service.list_inquiries(db, status=status, page=page, page_size=page_size)
    return {
        "items": [InquiryOut.model_validate(i) for i in rows],
        "total": total,
        "page": page,
        "page_size": page_size,
    }

# Record follow-up on an inquiry (staff only)
@router.patch("/{inquiry_id}", response_model=InquiryOut)
def update_inquiry(
    inquiry_id: int,
    payload: InquiryUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(role_required("ADMIN", "STAFF")),
):
    try:
        inquiry = inquiry_service.update_inquiry(
            db, inquiry_id, status=payload.status, staff_notes=payload.staff_notes
        )
    except CheckoutError as e:
        raise to_http_exception(e)

    write_log(db, user_id=current_user.id, action="INQUIRY_UPDATE", resource="inquiries", status="SUCCESS",
              meta={"inquiry_id": inquiry_id, **payload.model_dump(mode="json", exclude_none=True)})
    return InquiryOut.model_validate(inquiry)
