# storefront/repos/cart_repo.py
from sqlalchemy import select, update, delete
from sqlalchemy.orm import Session

from storefront.data.models.cart_line import CartLineModel
from storefront.data.models.product import ProductModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_line(self, line_id: int) -> CartLineModel | None:
        return self.db.get(CartLineModel, line_id)

    def get_line_for(self, user_id: str, product_id: int) -> CartLineModel | None:
        return self.db.execute(
            select(CartLineModel).where(
                CartLineModel.user_id == user_id,
                CartLineModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def increment_qty(self, user_id: str, product_id: int) -> int:
        """UPDATE ... SET qty = qty + 1, returns rowcount (0 when there is no line yet)."""
        result = self.db.execute(
            update(CartLineModel)
            .where(
                CartLineModel.user_id == user_id,
                CartLineModel.product_id == product_id,
            )
            .values(qty=CartLineModel.qty + 1)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def add_line(self, line: CartLineModel) -> CartLineModel:
        self.db.add(line)
        self.db.flush()
        return line

    def list_lines_with_products(self, user_id: str) -> list[tuple[CartLineModel, ProductModel]]:
        rows = self.db.execute(
            select(CartLineModel, ProductModel)
            .join(ProductModel, CartLineModel.product_id == ProductModel.id)
            .where(CartLineModel.user_id == user_id)
            .order_by(CartLineModel.id)
        ).all()
        return [(line, product) for line, product in rows]

    def delete_line(self, line_id: int) -> int:
        result = self.db.execute(
            delete(CartLineModel)
            .where(CartLineModel.id == line_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def delete_lines_for_user(self, user_id: str) -> int:
        result = self.db.execute(
            delete(CartLineModel)
            .where(CartLineModel.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def refresh(self, line: CartLineModel) -> CartLineModel:
        self.db.refresh(line)
        return line

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
