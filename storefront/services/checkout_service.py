# storefront/services/checkout_service.py
import re
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_line import OrderLineModel
from storefront.domain.errors import EmptyCartError, PersistenceError, ValidationError
from storefront.services.cart_service import CartService
from storefront.services.order_service import OrderService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

#local-part@domain.tld, no whitespace, exactly one @
EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")
CENT = Decimal("0.01")


def validate_customer(customer_name: str | None, customer_email: str | None) -> None:
    if not customer_name or not customer_name.strip():
        raise ValidationError("Customer name is required")
    if not customer_email or not EMAIL_PATTERN.fullmatch(customer_email):
        raise ValidationError("Customer email is invalid")


class CheckoutService:
    """
    Turns a user's cart into an order.

    1. validates the customer data (before touching storage)
    2. reads the cart joined with current catalog prices
    3. computes the total
    4. writes order + order lines and clears the cart in ONE transaction
    5. returns the receipt built from the lines read in step 2

    Steps 2-4 run under the user's cart lock, so no other operation on that
    cart can slip in between the read and the clear. Any storage failure
    rolls everything back and leaves the cart as it was.
    """

    def __init__(self, db: Session, lock_service=None):
        self.db = db
        self.carts = CartService(db, lock_service)
        self.orders = OrderService(db)
        self.lock_service = self.carts.lock_service

    def checkout(self, user_id: str, customer_name: str, customer_email: str) -> Dict[str, Any]:
        validate_customer(customer_name, customer_email)

        with self.lock_service.hold(user_id):
            lines = self.carts.list_for_user(user_id)
            if not lines:
                raise EmptyCartError("Cart is empty")

            #snapshot of catalog prices at this instant
            items = [
                {
                    "product_id": product.id,
                    "name": product.title,
                    "qty": line.qty,
                    "price": Decimal(product.price),
                }
                for line, product in lines
            ]
            total = sum((i["price"] * i["qty"] for i in items), Decimal("0.00"))
            total = total.quantize(CENT, rounding=ROUND_HALF_UP)
            created_at = datetime.now(timezone.utc)

            try:
                order = self.orders.record(
                    OrderModel(
                        customer_name=customer_name,
                        customer_email=customer_email,
                        total=total,
                        created_at=created_at,
                    ),
                    [
                        OrderLineModel(
                            product_id=i["product_id"],
                            qty=i["qty"],
                            price=i["price"],
                        )
                        for i in items
                    ],
                )
                cleared = self.carts.clear_for_user(user_id)
                self.db.commit()
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"Checkout of user {user_id} rolled back: {e}")
                raise PersistenceError("Checkout failed") from e

        logger.info(
            f"Checkout of user {user_id} created order {order.id}, "
            f"total {total}, {cleared} cart line(s) cleared"
        )

        return {
            "order_id": order.id,
            "customer_name": customer_name,
            "customer_email": customer_email,
            "total": total,
            "timestamp": created_at,
            "items": [
                {"name": i["name"], "qty": i["qty"], "price": i["price"]}
                for i in items
            ],
        }
