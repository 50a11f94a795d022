# storefront/services/cart_service.py
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.cart_line import CartLineModel
from storefront.data.models.product import ProductModel
from storefront.domain.errors import NotFoundError, PersistenceError
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.lock_service import LocalCartLockService
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Per-user cart.
    commands (add_or_increment, remove_line, clear_for_user) change state,
    query (list_for_user) only reads.
    At most one line per (user_id, product_id): a repeated add bumps qty.
    """

    def __init__(self, db: Session, lock_service=None):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)
        self.lock_service = lock_service or LocalCartLockService()

    #query
    def list_for_user(self, user_id: str) -> list[tuple[CartLineModel, ProductModel]]:
        try:
            return self.repo.list_lines_with_products(user_id)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to read cart of user {user_id}") from e

    #commands
    def add_or_increment(self, user_id: str, product_id: int) -> tuple[CartLineModel, bool]:
        """
        Returns (line, created). created is False when an existing line got qty + 1.
        """
        try:
            product = self.products.get_product(product_id)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to read product {product_id}") from e
        if product is None:
            raise NotFoundError(f"Product {product_id} not found")

        with self.lock_service.hold(user_id):
            try:
                line, created = self._upsert(user_id, product_id)
                self.repo.commit()
            except SQLAlchemyError as e:
                self.repo.rollback()
                logger.error(f"Failed to add product {product_id} to cart of user {user_id}: {e}")
                raise PersistenceError("Failed to add product to cart") from e

        if created:
            logger.info(f"Added product {product_id} to cart of user {user_id} (line {line.id})")
        else:
            logger.info(f"Incremented product {product_id} in cart of user {user_id} to qty {line.qty}")
        return line, created

    def _upsert(self, user_id: str, product_id: int) -> tuple[CartLineModel, bool]:
        #conditional update first, the unique constraint guards the insert
        if self.repo.increment_qty(user_id, product_id):
            return self.repo.refresh(self.repo.get_line_for(user_id, product_id)), False

        try:
            line = self.repo.add_line(
                CartLineModel(user_id=user_id, product_id=product_id, qty=1)
            )
            return line, True
        except IntegrityError:
            #another process inserted the same pair in the meantime,
            #nothing but the no-op update is lost by rolling back here
            self.repo.rollback()
            logger.info(f"Concurrent insert for user {user_id} product {product_id}, incrementing")
            if not self.repo.increment_qty(user_id, product_id):
                raise
            return self.repo.refresh(self.repo.get_line_for(user_id, product_id)), False

    def remove_line(self, cart_line_id: int) -> None:
        try:
            line = self.repo.get_line(cart_line_id)
        except SQLAlchemyError as e:
            raise PersistenceError(f"Failed to read cart item {cart_line_id}") from e
        if line is None:
            raise NotFoundError(f"Cart item {cart_line_id} not found")

        with self.lock_service.hold(line.user_id):
            try:
                deleted = self.repo.delete_line(cart_line_id)
                if deleted == 0:
                    self.repo.rollback()
                    raise NotFoundError(f"Cart item {cart_line_id} not found")
                self.repo.commit()
            except SQLAlchemyError as e:
                self.repo.rollback()
                raise PersistenceError("Failed to delete cart item") from e

        logger.info(f"Removed cart item {cart_line_id} of user {line.user_id}")

    def clear_for_user(self, user_id: str) -> int:
        """
        Delete every line of the user. Does not commit and does not lock:
        it runs inside the checkout transaction, which already holds both.
        """
        return self.repo.delete_lines_for_user(user_id)
