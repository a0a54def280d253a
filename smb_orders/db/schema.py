"""
Table definitions for the order store.

Tables are declared with SQLAlchemy Core so repositories can build
dialect-aware upserts (PostgreSQL in production, SQLite for local runs
and tests) over typed columns.
"""

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    Text,
    UniqueConstraint,
)

metadata = MetaData()

MONEY = Numeric(12, 2)
QUANTITY = Numeric(12, 3)

customers = Table(
    "customers",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False, index=True),
    Column("phone", String(64), nullable=False, server_default=""),
    Column("address", Text, nullable=False, server_default=""),
    Column("tags", Text, nullable=False, server_default=""),
)

products = Table(
    "products",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False, index=True),
    Column("price", MONEY, nullable=False, server_default="0"),
    Column("active", Boolean, nullable=False, server_default="1"),
)

orders = Table(
    "orders",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("order_date", Date, nullable=False),
    Column("customer_id", Integer, ForeignKey("customers.id"), nullable=False),
    Column("subtotal", MONEY, nullable=False, server_default="0"),
    Column("delivery_fee", MONEY, nullable=False, server_default="0"),
    Column("total", MONEY, nullable=False, server_default="0"),
    Column("notes", Text, nullable=False, server_default=""),
    Column("order_code", String(32), nullable=False),
    # One order per (date, customer): the consolidation key
    UniqueConstraint("order_date", "customer_id", name="uq_orders_date_customer"),
    UniqueConstraint("order_code", name="uq_orders_order_code"),
)

order_items = Table(
    "order_items",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("order_id", Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False),
    Column("product_id", Integer, ForeignKey("products.id"), nullable=False),
    Column("qty", QUANTITY, nullable=False),
    Column("price", MONEY, nullable=False),
    # Not unique: full replace stores duplicate product lines verbatim
    Index("ix_order_items_order_product", "order_id", "product_id"),
)

order_code_sequences = Table(
    "order_code_sequences",
    metadata,
    Column("order_date", Date, primary_key=True),
    Column("last_seq", Integer, nullable=False),
)
