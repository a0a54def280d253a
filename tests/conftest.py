"""Fixtures compartidos: base SQLite temporal y servicios de pedidos cableados."""

import os

# Antes de importar la app: la configuración se cachea al primer uso
os.environ["ENVIRONMENT"] = "testing"
os.environ["DEBUG"] = "false"
os.environ["LOG_FILE_PATH"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

from decimal import Decimal  # noqa: E402

import pytest_asyncio  # noqa: E402

from smb_orders.db.connection import ConnDB  # noqa: E402
from smb_orders.db.store import CustomerRepository, OrderRepository, ProductRepository  # noqa: E402
from smb_orders.services.orders import create_batch_importer, create_orchestrator  # noqa: E402


def sqlite_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'orders.db'}"


@pytest_asyncio.fixture
async def conn_db(tmp_path):
    """Conexión a un archivo SQLite nuevo por test, con el esquema creado."""
    db = ConnDB(sqlite_url(tmp_path))
    await db.initialize()
    await db.create_schema()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def orchestrator(conn_db):
    return create_orchestrator(conn_db)


@pytest_asyncio.fixture
async def importer(orchestrator):
    return create_batch_importer(orchestrator=orchestrator)


@pytest_asyncio.fixture
async def order_repo(conn_db):
    return OrderRepository(conn_db)


@pytest_asyncio.fixture
async def customer_repo(conn_db):
    return CustomerRepository(conn_db)


@pytest_asyncio.fixture
async def product_repo(conn_db):
    return ProductRepository(conn_db)


@pytest_asyncio.fixture
async def catalog(customer_repo, product_repo):
    """Clientes y productos base; devuelve sus ids por nombre corto."""
    return {
        "john": await customer_repo.create_customer("John", phone="0812345678", address="12 Sukhumvit"),
        "mary": await customer_repo.create_customer("Mary"),
        "peter": await customer_repo.create_customer("Peter"),
        "rice": await product_repo.create_product("Rice", price=Decimal("50")),
        "tea": await product_repo.create_product("Tea", price=Decimal("20")),
        "noodles": await product_repo.create_product("Noodles", price=Decimal("40")),
    }
