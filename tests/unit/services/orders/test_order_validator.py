"""Tests unitarios para la validación de payloads de pedidos."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from smb_orders.services.orders.validators import OrderValidator
from smb_orders.utils.error_handler import ErrorCode, ValidationException


def _payload(**overrides):
    payload = {
        "date": "2025-09-01",
        "customerId": 1,
        "items": [{"productId": 10, "qty": 2, "price": 50}],
    }
    payload.update(overrides)
    return payload


class TestValidateCreate:
    """Tests para validate_create."""

    def test_valid_payload(self):
        """Debe producir un comando con tipos normalizados."""
        command = OrderValidator().validate_create(_payload(deliveryFee="30", notes="Leave at door"))

        assert command.order_date == date(2025, 9, 1)
        assert command.customer_id == 1
        assert command.lines[0].product_id == 10
        assert command.lines[0].qty == Decimal("2")
        assert command.lines[0].price == Decimal("50")
        assert command.delivery_fee == Decimal("30")
        assert command.notes == "Leave at door"

    def test_iso_timestamp_is_truncated_to_day(self):
        """Un timestamp ISO debe reducirse a su día."""
        command = OrderValidator().validate_create(_payload(date="2025-09-01T18:30:00Z"))
        assert command.order_date == date(2025, 9, 1)

    def test_datetime_object_is_reduced_to_day(self):
        """Un datetime debe convertirse a date."""
        command = OrderValidator().validate_create(_payload(date=datetime(2025, 9, 1, 8, 0)))
        assert command.order_date == date(2025, 9, 1)

    @pytest.mark.parametrize("field", ["date", "customerId"])
    def test_missing_required_field(self, field):
        """Debe rechazar payloads sin fecha o cliente."""
        payload = _payload()
        del payload[field]

        with pytest.raises(ValidationException) as exc_info:
            OrderValidator().validate_create(payload)

        assert exc_info.value.field == field
        assert exc_info.value.error_code == ErrorCode.MISSING_REQUIRED_FIELD

    @pytest.mark.parametrize("items", [None, []])
    def test_items_required_and_non_empty(self, items):
        """Debe rechazar items ausente o vacío."""
        with pytest.raises(ValidationException) as exc_info:
            OrderValidator().validate_create(_payload(items=items))

        assert exc_info.value.field == "items"

    def test_blank_delivery_fee_means_not_supplied(self):
        """Un costo vacío debe quedar como no enviado."""
        assert OrderValidator().validate_create(_payload(deliveryFee="")).delivery_fee is None
        assert OrderValidator().validate_create(_payload()).delivery_fee is None

    def test_zero_delivery_fee_is_supplied(self):
        """Un costo 0 explícito debe conservarse."""
        assert OrderValidator().validate_create(_payload(deliveryFee=0)).delivery_fee == Decimal("0")

    def test_negative_qty_rejected(self):
        """Debe rechazar cantidades negativas."""
        with pytest.raises(ValidationException) as exc_info:
            OrderValidator().validate_create(_payload(items=[{"productId": 10, "qty": -1, "price": 50}]))

        assert exc_info.value.field == "items[0].qty"

    def test_non_numeric_price_rejected(self):
        """Debe rechazar precios no numéricos."""
        with pytest.raises(ValidationException) as exc_info:
            OrderValidator().validate_create(_payload(items=[{"productId": 10, "qty": 1, "price": "abc"}]))

        assert exc_info.value.field == "items[0].price"

    def test_blank_qty_and_price_count_as_zero(self):
        """Cantidad y precio vacíos deben valer 0."""
        command = OrderValidator().validate_create(_payload(items=[{"productId": 10, "qty": "", "price": None}]))

        assert command.lines[0].qty == Decimal("0")
        assert command.lines[0].price == Decimal("0")

    def test_missing_product_id_rejected(self):
        """Cada línea debe indicar su producto."""
        with pytest.raises(ValidationException) as exc_info:
            OrderValidator().validate_create(_payload(items=[{"qty": 1, "price": 5}]))

        assert exc_info.value.field == "items[0].productId"


class TestValidateReplace:
    """Tests para validate_replace."""

    def test_defaults_for_omitted_fields(self):
        """Costo omitido vale 0, notas omitidas quedan vacías e items omitido es lista vacía."""
        command = OrderValidator().validate_replace("7", {"date": "2025-09-02", "customerId": 3})

        assert command.order_id == 7
        assert command.lines == []
        assert command.delivery_fee == Decimal("0")
        assert command.notes == ""

    def test_missing_id_rejected(self):
        """Debe rechazar el reemplazo sin id."""
        with pytest.raises(ValidationException) as exc_info:
            OrderValidator().validate_replace(None, _payload())

        assert exc_info.value.field == "id"


class TestParsers:
    """Tests para los parsers estáticos."""

    @pytest.mark.parametrize("value", ["abc", 0, -3, True, "1.5"])
    def test_parse_id_rejects_invalid(self, value):
        """Debe rechazar ids no enteros o no positivos."""
        with pytest.raises(ValidationException):
            OrderValidator.parse_id(value, "id")

    def test_parse_id_accepts_numeric_text(self):
        """Debe aceptar ids como texto."""
        assert OrderValidator.parse_id(" 7 ", "id") == 7

    def test_parse_date_rejects_garbage(self):
        """Debe rechazar fechas imposibles."""
        with pytest.raises(ValidationException) as exc_info:
            OrderValidator.parse_date("2025-13-45", "date")

        assert exc_info.value.expected_format == "YYYY-MM-DD"

    def test_parse_month(self):
        """Debe devolver el rango semiabierto del mes."""
        assert OrderValidator.parse_month("2025-09") == (date(2025, 9, 1), date(2025, 10, 1))

    def test_parse_month_december_rolls_over(self):
        """Diciembre debe terminar el 1 de enero del año siguiente."""
        assert OrderValidator.parse_month("2025-12") == (date(2025, 12, 1), date(2026, 1, 1))

    @pytest.mark.parametrize("value", ["2025-13", "202509", "2025-9", "", None])
    def test_parse_month_rejects_malformed(self, value):
        """Debe rechazar meses mal formados."""
        with pytest.raises(ValidationException):
            OrderValidator.parse_month(value)
