from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from storefront.api import create_app
from storefront.api.deps import get_lock_service
from storefront.data.database import get_db, init_db
from storefront.data.models.product import ProductModel
from storefront.services.lock_service import LocalCartLockService


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture()
def lock_service():
    return LocalCartLockService(wait=1)


def make_product(product_id, price, title=None):
    return ProductModel(
        id=product_id,
        title=title or f"Product {product_id}",
        price=Decimal(price),
        description="",
        category="misc",
        image=f"https://img.example/{product_id}.jpg",
        rate=4.5,
        rating_count=10,
    )


@pytest.fixture()
def products(db):
    """Catalog with prices used across the checkout scenarios."""
    rows = [
        make_product(1, "9.99", "Backpack"),
        make_product(2, "4.00", "T-Shirt"),
        make_product(3, "10.00", "Mug"),
        make_product(4, "5.50", "Notebook"),
    ]
    db.add_all(rows)
    db.commit()
    return rows


@pytest.fixture()
def client(session_factory, lock_service, products):
    app = create_app(with_lifespan=False)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_lock_service] = lambda: lock_service
    return TestClient(app)
