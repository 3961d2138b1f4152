# storefront/models.py
from sqlalchemy import Column, Integer, SmallInteger, String, Text, ForeignKey, Numeric, DateTime, CheckConstraint, func
from sqlalchemy.orm import relationship
from .database import Base


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint("units_in_stock >= 0", name="ck_products_stock_non_negative"),
    )
    product_id = Column(Integer, primary_key=True, autoincrement=True)
    product_name = Column(String(255), nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False, default=0)
    units_in_stock = Column(Integer, nullable=False, default=0)
    image_url = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    date_added = Column(DateTime, nullable=False, server_default=func.now())
    last_updated = Column(DateTime, nullable=False, server_default=func.now())


class OrderLine(Base):
    # no order header table: an order exists through its lines
    __tablename__ = "order_details"
    __table_args__ = (
        CheckConstraint("discount >= 0 AND discount <= 1", name="ck_order_details_discount_range"),
    )
    order_id = Column(Integer, primary_key=True, autoincrement=False)
    line_no = Column(Integer, primary_key=True, autoincrement=False)
    product_id = Column(Integer, ForeignKey("products.product_id"), nullable=False, index=True)
    unit_price = Column(Numeric(10, 2), nullable=False)  # price snapshot at checkout
    quantity = Column(SmallInteger, nullable=False)
    discount = Column(Numeric(5, 4), nullable=False, default=0)

    product = relationship("Product")


class OrderIdSequence(Base):
    __tablename__ = "order_id_seq"
    # AUTOINCREMENT keeps sqlite from handing out a rowid twice
    __table_args__ = {"sqlite_autoincrement": True}
    order_id = Column(Integer, primary_key=True, autoincrement=True)
    issued_at = Column(DateTime, nullable=False, server_default=func.now())


class StockMovement(Base):
    __tablename__ = "stock_transactions"
    id = Column(Integer, primary_key=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("products.product_id"), nullable=False, index=True)
    order_id = Column(Integer, nullable=True, index=True)
    change_qty = Column(Integer, nullable=False)  # negative for sales
    user_id = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, server_default=func.now())
