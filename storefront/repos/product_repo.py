# storefront/repos/product_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def list_products(self) -> list[ProductModel]:
        return list(self.db.execute(select(ProductModel).order_by(ProductModel.id)).scalars())

    def add_if_absent(self, product: ProductModel) -> bool:
        #insert-if-absent, existing rows are never overwritten
        if self.get_product(product.id) is not None:
            return False
        self.db.add(product)
        return True

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()
