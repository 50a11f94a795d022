# storefront/services/catalog_service.py
from decimal import Decimal
from typing import Iterable, Any

from pydantic import TypeAdapter, ValidationError as SchemaError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel
from storefront.domain.errors import NotFoundError, PersistenceError
from storefront.domain.schemas import ProductIn
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

CENT = Decimal("0.01")

#feed body has to be a JSON array, items are checked one by one
FEED_ADAPTER = TypeAdapter(list[Any])


class CatalogService:
    """
    Read-mostly product catalog.
    Rows are created only by sync_from_source and never modified afterwards.
    """

    def __init__(self, db: Session):
        self.repo = ProductRepo(db)

    #query
    def lookup(self, product_id: int) -> ProductModel:
        try:
            product = self.repo.get_product(product_id)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to read product {product_id}") from e

        if product is None:
            raise NotFoundError(f"Product {product_id} not found")
        return product

    def list_products(self) -> list[ProductModel]:
        try:
            return self.repo.list_products()
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to read products") from e

    #command
    def sync_from_source(self, products: Iterable[Any]) -> int:
        """
        Merge feed products into the catalog, insert-if-absent.
        Safe to call on every start: ids already present are left untouched.
        Returns the number of inserted products.
        Malformed items are logged and skipped, a body that is not a list
        raises pydantic's ValidationError.
        """
        items = []
        for position, raw in enumerate(FEED_ADAPTER.validate_python(products)):
            try:
                items.append(ProductIn.model_validate(raw))
            except SchemaError as e:
                logger.warning(f"Skipping malformed feed product at position {position}: {e.error_count()} error(s)")

        inserted = 0
        seen = set()
        try:
            for item in items:
                if item.id in seen:
                    continue
                seen.add(item.id)
                added = self.repo.add_if_absent(
                    ProductModel(
                        id=item.id,
                        title=item.title,
                        price=Decimal(str(item.price)).quantize(CENT),
                        description=item.description,
                        category=item.category,
                        image=item.image,
                        rate=item.rating.rate,
                        rating_count=item.rating.count,
                    )
                )
                if added:
                    inserted += 1
            self.repo.commit()
        except SQLAlchemyError as e:
            self.repo.rollback()
            logger.error(f"Catalog sync rolled back: {e}")
            raise PersistenceError("Failed to sync catalog") from e

        logger.info(f"Catalog sync: {inserted} inserted, {len(seen) - inserted} already present")
        return inserted
