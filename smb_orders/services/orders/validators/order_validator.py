"""
OrderValidator service for validating order requests before any mutation.

This service follows SRP (Single Responsibility Principle) by focusing only on
turning raw request payloads into validated commands.
"""

import logging
import re
from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from smb_orders.domain.models import OrderLine
from smb_orders.domain.value_objects import is_blank, parse_decimal
from smb_orders.services.orders.commands import CreateOrderCommand, ReplaceOrderCommand
from smb_orders.utils.error_handler import ErrorCode, ValidationException

logger = logging.getLogger(__name__)

MONTH_PATTERN = re.compile(r"^\d{4}-(0[1-9]|1[0-2])$")


class OrderValidator:
    """
    Validates order payloads (camelCase keys, as sent on the wire).

    Responsibilities:
    - Validate required fields
    - Parse dates, ids and numeric amounts
    - Validate item lines
    """

    def validate_create(self, payload: Mapping[str, Any]) -> CreateOrderCommand:
        """
        Validate a create-or-merge payload.

        Args:
            payload: Dict with date, customerId, items, deliveryFee?, notes?

        Returns:
            CreateOrderCommand: Validated command

        Raises:
            ValidationException: If date, customerId or a non-empty items list is missing
        """
        order_date = self.parse_date(payload.get("date"), "date")
        customer_id = self.parse_id(payload.get("customerId"), "customerId")

        items = payload.get("items")
        if not isinstance(items, list) or len(items) == 0:
            raise ValidationException(
                message="items[] is required and must not be empty",
                field="items",
                invalid_value=items,
                error_code=ErrorCode.MISSING_REQUIRED_FIELD,
            )
        lines = self._validate_lines(items)

        fee_raw = payload.get("deliveryFee")
        delivery_fee = None if is_blank(fee_raw) else self.parse_amount(fee_raw, "deliveryFee")

        notes = payload.get("notes")
        if notes is not None and not isinstance(notes, str):
            raise ValidationException(message="notes must be a string", field="notes", invalid_value=notes)

        logger.debug(f"Create payload validated: date={order_date} customer={customer_id} lines={len(lines)}")
        return CreateOrderCommand(
            order_date=order_date,
            customer_id=customer_id,
            lines=lines,
            delivery_fee=delivery_fee,
            notes=notes,
        )

    def validate_replace(self, order_id: Any, payload: Mapping[str, Any]) -> ReplaceOrderCommand:
        """
        Validate a full replace payload.

        deliveryFee defaults to 0 and notes to "" when omitted; items may be
        empty (the order ends up with no items).

        Raises:
            ValidationException: If id, date or customerId is missing
        """
        order_id = self.parse_id(order_id, "id")
        order_date = self.parse_date(payload.get("date"), "date")
        customer_id = self.parse_id(payload.get("customerId"), "customerId")

        items = payload.get("items")
        if items is None:
            items = []
        if not isinstance(items, list):
            raise ValidationException(message="items must be a list", field="items", invalid_value=items)

        notes = payload.get("notes")
        return ReplaceOrderCommand(
            order_id=order_id,
            order_date=order_date,
            customer_id=customer_id,
            lines=self._validate_lines(items),
            delivery_fee=self.parse_amount(payload.get("deliveryFee"), "deliveryFee"),
            notes=notes if isinstance(notes, str) else "",
        )

    def _validate_lines(self, items: list[Any]) -> list[OrderLine]:
        lines = []
        for index, item in enumerate(items):
            if not isinstance(item, Mapping):
                raise ValidationException(
                    message=f"items[{index}] must be an object", field=f"items[{index}]", invalid_value=item
                )
            lines.append(
                OrderLine(
                    product_id=self.parse_id(item.get("productId"), f"items[{index}].productId"),
                    qty=self.parse_amount(item.get("qty"), f"items[{index}].qty"),
                    price=self.parse_amount(item.get("price"), f"items[{index}].price"),
                )
            )
        return lines

    @staticmethod
    def parse_date(value: Any, field: str) -> date:
        """
        Parse a calendar day given as ``date`` or ``YYYY-MM-DD`` text.

        Longer ISO strings are truncated to their first 10 characters.
        """
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if is_blank(value):
            raise ValidationException(
                message=f"{field} is required",
                field=field,
                error_code=ErrorCode.MISSING_REQUIRED_FIELD,
            )
        try:
            return date.fromisoformat(str(value).strip()[:10])
        except ValueError as e:
            raise ValidationException(
                message=f"{field} must be a valid date",
                field=field,
                invalid_value=value,
                expected_format="YYYY-MM-DD",
            ) from e

    @staticmethod
    def parse_id(value: Any, field: str) -> int:
        """Parse a positive integer identifier."""
        if is_blank(value):
            raise ValidationException(
                message=f"{field} is required",
                field=field,
                error_code=ErrorCode.MISSING_REQUIRED_FIELD,
            )
        if isinstance(value, bool):
            raise ValidationException(message=f"{field} must be an integer id", field=field, invalid_value=value)
        try:
            parsed = int(str(value).strip())
        except ValueError as e:
            raise ValidationException(
                message=f"{field} must be an integer id", field=field, invalid_value=value
            ) from e
        if parsed <= 0:
            raise ValidationException(message=f"{field} must be positive", field=field, invalid_value=value)
        return parsed

    @staticmethod
    def parse_amount(value: Any, field: str) -> Decimal:
        """Parse a non-negative quantity or amount; blank means 0."""
        try:
            amount = parse_decimal(value)
        except ValueError as e:
            raise ValidationException(message=f"{field} must be numeric", field=field, invalid_value=value) from e
        if amount < 0:
            raise ValidationException(message=f"{field} cannot be negative", field=field, invalid_value=value)
        return amount

    @staticmethod
    def parse_month(value: Any) -> tuple[date, date]:
        """
        Parse ``YYYY-MM`` into the half-open range [first day, first day of next month).

        Raises:
            ValidationException: If the month is malformed
        """
        if not isinstance(value, str) or not MONTH_PATTERN.match(value):
            raise ValidationException(
                message="month must be formatted as YYYY-MM",
                field="month",
                invalid_value=value,
                expected_format="YYYY-MM",
            )
        year, month = int(value[:4]), int(value[5:7])
        start = date(year, month, 1)
        end = date(year + 1, 1, 1) if month == 12 else date(year, month + 1, 1)
        return start, end
