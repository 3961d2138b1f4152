import os
import tempfile

# the package builds its engine at import time, so point it at a scratch db first
_tmpdir = tempfile.mkdtemp(prefix="storefront-tests-")
os.environ["DB_URL"] = "sqlite:///" + os.path.join(_tmpdir, "test.db")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from storefront.database import Base, SessionLocal, engine
from storefront.main import app
from storefront.models import Product


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def add_product(db):
    def _add(product_id, price, stock, name=None):
        db.add(Product(
            product_id=product_id,
            product_name=name or f"Product {product_id}",
            unit_price=Decimal(price),
            units_in_stock=stock,
        ))
        db.commit()
        return product_id
    return _add


@pytest.fixture
def stock_of(db):
    def _stock(product_id):
        db.expire_all()
        return db.get(Product, product_id).units_in_stock
    return _stock
