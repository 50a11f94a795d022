"""Tests for cart mutation and listing."""

import threading

import pytest
from sqlalchemy import create_engine, select, func
from sqlalchemy.orm import sessionmaker

from storefront.data.database import init_db
from storefront.data.models.cart_line import CartLineModel
from storefront.domain.errors import NotFoundError
from storefront.services.cart_service import CartService

from tests.conftest import make_product


def _count_lines(db, user_id):
    return db.execute(
        select(func.count()).select_from(CartLineModel).where(CartLineModel.user_id == user_id)
    ).scalar_one()


class TestAddOrIncrement:
    def test_first_add_creates_line_with_qty_one(self, db, products, lock_service):
        line, created = CartService(db, lock_service).add_or_increment("u1", 1)

        assert created is True
        assert line.id is not None
        assert line.qty == 1

    def test_repeated_add_increments_single_line(self, db, products, lock_service):
        svc = CartService(db, lock_service)
        first, _ = svc.add_or_increment("u1", 2)
        for _ in range(4):
            line, created = svc.add_or_increment("u1", 2)
            assert created is False
            assert line.id == first.id

        assert _count_lines(db, "u1") == 1
        assert line.qty == 5

    def test_same_product_for_different_users_is_separate(self, db, products, lock_service):
        svc = CartService(db, lock_service)
        a, _ = svc.add_or_increment("u1", 1)
        b, _ = svc.add_or_increment("u2", 1)

        assert a.id != b.id
        assert a.qty == b.qty == 1

    def test_unknown_product_is_rejected(self, db, products, lock_service):
        with pytest.raises(NotFoundError):
            CartService(db, lock_service).add_or_increment("u1", 999)

        assert _count_lines(db, "u1") == 0

    def test_concurrent_adds_keep_one_line(self, tmp_path, lock_service):
        #file database: every thread needs its own connection
        engine = create_engine(f"sqlite:///{tmp_path / 'cart.db'}", connect_args={"check_same_thread": False})
        init_db(bind=engine)
        session_factory = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
        with session_factory() as session:
            session.add(make_product(3, "10.00"))
            session.commit()

        def add():
            session = session_factory()
            try:
                CartService(session, lock_service).add_or_increment("u1", 3)
            finally:
                session.close()

        threads = [threading.Thread(target=add) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        session = session_factory()
        try:
            lines = CartService(session, lock_service).list_for_user("u1")
        finally:
            session.close()
        engine.dispose()
        assert len(lines) == 1
        assert lines[0][0].qty == 8


class TestListForUser:
    def test_lines_are_joined_with_catalog_in_insertion_order(self, db, products, lock_service):
        svc = CartService(db, lock_service)
        svc.add_or_increment("u1", 4)
        svc.add_or_increment("u1", 1)
        svc.add_or_increment("u2", 2)

        lines = svc.list_for_user("u1")

        assert [product.id for _, product in lines] == [4, 1]
        assert [product.title for _, product in lines] == ["Notebook", "Backpack"]
        assert all(line.user_id == "u1" for line, _ in lines)

    def test_empty_cart(self, db, products, lock_service):
        assert CartService(db, lock_service).list_for_user("nobody") == []


class TestRemoveLine:
    def test_remove_existing_line(self, db, products, lock_service):
        svc = CartService(db, lock_service)
        line, _ = svc.add_or_increment("u1", 1)

        svc.remove_line(line.id)

        assert svc.list_for_user("u1") == []

    def test_remove_missing_line_leaves_others(self, db, products, lock_service):
        svc = CartService(db, lock_service)
        line, _ = svc.add_or_increment("u1", 1)

        with pytest.raises(NotFoundError):
            svc.remove_line(line.id + 100)

        lines = svc.list_for_user("u1")
        assert len(lines) == 1
        assert lines[0][0].qty == 1


class TestClearForUser:
    def test_clear_only_touches_that_user(self, db, products, lock_service):
        svc = CartService(db, lock_service)
        svc.add_or_increment("u1", 1)
        svc.add_or_increment("u1", 2)
        svc.add_or_increment("u2", 1)

        assert svc.clear_for_user("u1") == 2
        db.commit()

        assert svc.list_for_user("u1") == []
        assert len(svc.list_for_user("u2")) == 1

    def test_clear_empty_cart_is_noop(self, db, products, lock_service):
        assert CartService(db, lock_service).clear_for_user("nobody") == 0
