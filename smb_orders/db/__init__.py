"""
Módulo de acceso a la base de datos de pedidos.

- ConnDB: Gestión exclusiva de conexiones, sesiones y transacciones
- schema: Definición de tablas (SQLAlchemy Core)
- store: Repositorios por agregado (clientes, productos, pedidos)
"""

from smb_orders.db.connection import ConnDB, get_db_connection
from smb_orders.db.schema import metadata

__all__ = [
    "ConnDB",
    "get_db_connection",
    "metadata",
]
