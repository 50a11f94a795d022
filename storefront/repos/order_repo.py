# storefront/repos/order_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_line import OrderLineModel


class OrderRepo:
    """
    Append-only access to orders. No update or delete exists,
    corrections are new orders.
    """

    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel, lines: list[OrderLineModel]) -> OrderModel:
        #flush only, the caller commits together with the rest of its unit of work
        self.db.add(order)
        self.db.flush()
        for line in lines:
            line.order_id = order.id
            self.db.add(line)
        self.db.flush()
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def get_order_lines(self, order_id: int) -> list[OrderLineModel]:
        return list(
            self.db.execute(
                select(OrderLineModel)
                .where(OrderLineModel.order_id == order_id)
                .order_by(OrderLineModel.id)
            ).scalars()
        )
