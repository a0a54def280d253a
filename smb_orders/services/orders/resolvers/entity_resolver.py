"""EntityResolver service - SRP compliance."""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date

from smb_orders.db.store.customer_repository import CustomerRepository
from smb_orders.db.store.product_repository import ProductRepository
from smb_orders.domain.models import CustomerDomain
from smb_orders.utils.error_handler import ValidationException

logger = logging.getLogger(__name__)


@dataclass
class ImportContext:
    """
    Lookup caches scoped to a single bulk import call.

    Each import gets a fresh context, so nothing leaks between calls.
    """

    import_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])
    customer_ids: dict[str, int] = field(default_factory=dict)
    product_ids: dict[str, int] = field(default_factory=dict)
    order_ids: dict[tuple[date, int], int] = field(default_factory=dict)


class EntityResolver:
    """
    Resolves customer and product names to ids, creating them on demand.

    Creations commit immediately in their own transaction: an entity
    created for a group stays in the store even if that group later fails.
    """

    def __init__(self, customer_repo: CustomerRepository, product_repo: ProductRepository):
        """
        Initialize with SOLID dependencies (DIP).

        Args:
            customer_repo: Repository for customer operations
            product_repo: Repository for product operations
        """
        self.customer_repo = customer_repo
        self.product_repo = product_repo

    async def resolve_customer(self, ctx: ImportContext, name: str, phone: str = "", address: str = "") -> int:
        """
        Resolve a customer name to an id.

        An existing customer with the exact (trimmed) name is reused, and its
        blank phone or address is filled from the row. Otherwise a new
        customer is created with the row's contact data.

        Returns:
            int: Customer ID

        Raises:
            ValidationException: If the name is blank
        """
        name = (name or "").strip()
        if not name:
            raise ValidationException(message="Customer name is required", field="customerName")

        if name in ctx.customer_ids:
            return ctx.customer_ids[name]

        phone = (phone or "").strip()
        address = (address or "").strip()

        existing = await self.customer_repo.find_customer_by_name(name)
        if existing:
            customer = CustomerDomain.from_dict(existing)
            customer_id = customer.id
            supplied = {"phone": phone, "address": address}
            if any(supplied[field_name] for field_name in customer.missing_contact_fields):
                await self.customer_repo.backfill_contact(customer_id, phone=phone, address=address)
            logger.debug(f"Found existing customer: {customer_id} for {name}")
        else:
            customer_id = await self.customer_repo.create_customer(name, phone=phone, address=address)
            logger.info(f"Created new customer: {customer_id} for {name}")

        ctx.customer_ids[name] = customer_id
        return customer_id

    async def resolve_product(self, ctx: ImportContext, name: str) -> int:
        """
        Resolve a product name to an id, creating it with price 0 if missing.

        Returns:
            int: Product ID

        Raises:
            ValidationException: If the name is blank
        """
        name = (name or "").strip()
        if not name:
            raise ValidationException(message="Product name is required", field="productName")

        if name in ctx.product_ids:
            return ctx.product_ids[name]

        existing = await self.product_repo.find_product_by_name(name)
        if existing:
            product_id = existing["id"]
        else:
            product_id = await self.product_repo.create_product(name)
            logger.info(f"Created new product: {product_id} for {name}")

        ctx.product_ids[name] = product_id
        return product_id
