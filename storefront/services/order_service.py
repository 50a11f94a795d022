# storefront/services/order_service.py
from decimal import Decimal
from typing import Any, Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_line import OrderLineModel
from storefront.domain.errors import NotFoundError, PersistenceError
from storefront.repos.order_repo import OrderRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class OrderService:
    """
    Order ledger: append-only record of completed checkouts.
    Orders and their lines never change after creation.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = OrderRepo(db)

    def record(self, order: OrderModel, lines: list[OrderLineModel]) -> OrderModel:
        """
        Write an order together with its lines inside the caller's transaction.
        Used by checkout only; nothing is committed here.
        """
        if not lines:
            raise ValueError("An order needs at least one line")

        expected = sum((line.price * line.qty for line in lines), Decimal("0.00"))
        if Decimal(order.total) != expected:
            raise ValueError(f"Order total {order.total} does not match its lines ({expected})")

        created = self.repo.add_order(order, lines)
        logger.info(f"Recorded order {created.id} with {len(lines)} line(s), total {created.total}")
        return created

    def get(self, order_id: int) -> tuple[OrderModel, list[OrderLineModel]]:
        try:
            order = self.repo.get_order(order_id)
            if order is None:
                raise NotFoundError(f"Order {order_id} not found")
            return order, self.repo.get_order_lines(order_id)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to read order {order_id}") from e

    def get_order(self, order_id: int) -> Dict[str, Any]:
        order, lines = self.get(order_id)
        return {
            "id": order.id,
            "customer_name": order.customer_name,
            "customer_email": order.customer_email,
            "total": order.total,
            "created_at": order.created_at,
            "lines": [
                {
                    "product_id": line.product_id,
                    "qty": line.qty,
                    "price": line.price,
                }
                for line in lines
            ],
        }
