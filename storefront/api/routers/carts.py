#storefront/api/routers/carts.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.api.deps import get_lock_service
from storefront.data.database import get_db
from storefront.domain.errors import NotFoundError, PersistenceError
from storefront.domain.schemas import (
    CartAddIn,
    CartAddOut,
    CartLineOut,
    MessageOut,
)
from storefront.services.cart_service import CartService
from storefront.utils.settings import DEFAULT_USER_ID

router = APIRouter(prefix="/api/cart", tags=["cart"])


def get_service(db: Session, lock_service):
    return CartService(db=db, lock_service=lock_service)


@router.post("", response_model=CartAddOut)
def add_to_cart(
    payload: CartAddIn,
    db: Session = Depends(get_db),
    lock_service=Depends(get_lock_service),
):
    svc = get_service(db, lock_service)
    try:
        line, created = svc.add_or_increment(payload.user_id or DEFAULT_USER_ID, payload.product_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return {
        "message": "Item added to cart" if created else "Quantity incremented",
        "cart_item_id": line.id,
        "qty": line.qty,
        "created": created,
    }


@router.get("", response_model=List[CartLineOut])
def get_cart(
    user_id: str = Query(DEFAULT_USER_ID, min_length=1),
    db: Session = Depends(get_db),
    lock_service=Depends(get_lock_service),
):
    svc = get_service(db, lock_service)
    try:
        lines = svc.list_for_user(user_id)
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return [
        {
            "cart_id": line.id,
            "user_id": line.user_id,
            "product_id": product.id,
            "qty": line.qty,
            "title": product.title,
            "price": product.price,
            "image": product.image,
        }
        for line, product in lines
    ]


@router.delete("/{cart_item_id}", response_model=MessageOut)
def remove_item(
    cart_item_id: int,
    db: Session = Depends(get_db),
    lock_service=Depends(get_lock_service),
):
    svc = get_service(db, lock_service)
    try:
        svc.remove_line(cart_item_id)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"message": "Item removed from cart"}
