# storefront/api/routers/checkout.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront.api.deps import get_lock_service
from storefront.data.database import get_db
from storefront.domain.errors import EmptyCartError, PersistenceError, ValidationError
from storefront.domain.schemas import CheckoutIn, ReceiptOut
from storefront.services.checkout_service import CheckoutService
from storefront.utils.settings import DEFAULT_USER_ID

router = APIRouter(prefix="/api/checkout", tags=["checkout"])


@router.post("", response_model=ReceiptOut)
def checkout(
    payload: CheckoutIn,
    db: Session = Depends(get_db),
    lock_service=Depends(get_lock_service),
):
    """
    Creates an order from the user's cart and returns the receipt.
    Without user_id the default (anonymous) user is checked out.
    """
    svc = CheckoutService(db, lock_service=lock_service)
    try:
        return svc.checkout(
            payload.user_id or DEFAULT_USER_ID,
            payload.customer_name,
            payload.customer_email,
        )
    except (ValidationError, EmptyCartError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))
