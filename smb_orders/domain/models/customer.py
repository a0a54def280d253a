"""
Customer domain model.

Represents a customer entity with business logic and validation.
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class CustomerDomain:
    """
    Domain model representing a customer.

    Customers are identified by id; imports look them up by exact name.

    Attributes:
        name: Display name, also the import lookup key
        phone: Contact phone (may be blank)
        address: Delivery address (may be blank)
        tags: Free-form tags
        id: Customer ID (None for new customers)
    """

    name: str
    phone: str = ""
    address: str = ""
    tags: str = ""
    id: int | None = None

    def __post_init__(self) -> None:
        """Validate customer data after initialization."""
        self.name = (self.name or "").strip()
        if not self.name:
            raise ValueError("Customer name is required")

    @property
    def missing_contact_fields(self) -> list[str]:
        """Contact fields still blank on this record."""
        return [name for name in ("phone", "address") if not (getattr(self, name) or "").strip()]

    def to_dict(self) -> dict[str, Any]:
        """Convert customer to dictionary for persistence."""
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "address": self.address,
            "tags": self.tags,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CustomerDomain":
        """Create customer from dictionary."""
        return cls(
            id=data.get("id"),
            name=data.get("name", ""),
            phone=data.get("phone") or "",
            address=data.get("address") or "",
            tags=data.get("tags") or "",
        )
