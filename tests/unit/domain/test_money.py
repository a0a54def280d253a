"""Tests unitarios para Money, parse_decimal y OrderDomain."""

from datetime import date
from decimal import Decimal

import pytest

from smb_orders.domain.models import OrderDomain, OrderItemDomain, OrderLine
from smb_orders.domain.value_objects import Money, parse_decimal


class TestMoney:
    """Tests para el value object Money."""

    def test_rounds_to_cents_half_up(self):
        """Debe redondear a dos decimales con half-up."""
        assert Money.of("1.005").amount == Decimal("1.01")
        assert Money.of(2).amount == Decimal("2.00")

    def test_negative_rejected(self):
        """No debe aceptar montos negativos."""
        with pytest.raises(ValueError):
            Money.of("-1")

    def test_add_requires_same_currency(self):
        """Sumar monedas distintas debe fallar."""
        with pytest.raises(ValueError):
            Money.of(1, currency="THB") + Money.of(1, currency="USD")

    def test_multiply_by_quantity(self):
        """Debe multiplicar por cantidades decimales."""
        assert (Money.of("55") * Decimal("1.5")).amount == Decimal("82.50")


class TestParseDecimal:
    """Tests para parse_decimal."""

    def test_blank_is_default(self):
        """None y cadenas vacías deben devolver el valor por defecto."""
        assert parse_decimal(None) == Decimal("0")
        assert parse_decimal("  ") == Decimal("0")

    def test_float_goes_through_str(self):
        """Un float no debe arrastrar error binario."""
        assert parse_decimal(0.1) == Decimal("0.1")

    @pytest.mark.parametrize("value", ["abc", "NaN", "Infinity", True, [1]])
    def test_rejects_non_numeric(self, value):
        """Debe rechazar valores no numéricos o no finitos."""
        with pytest.raises(ValueError):
            parse_decimal(value)


class TestOrderDomain:
    """Tests para OrderDomain y modelos de línea."""

    def test_from_dict_with_items(self):
        """Debe construir el pedido con sus líneas y totales balanceados."""
        order = OrderDomain.from_dict(
            {
                "id": 1,
                "order_date": date(2025, 9, 1),
                "customer_id": 3,
                "order_code": "010925_1",
                "subtotal": Decimal("295"),
                "delivery_fee": Decimal("20"),
                "total": Decimal("315"),
                "notes": None,
            },
            items=[{"id": 5, "order_id": 1, "product_id": 10, "qty": "5", "price": "55", "product_name": "Rice"}],
        )

        assert order.is_balanced
        assert order.notes == ""
        assert order.items_count == 1
        assert order.item_for_product(10).line_total.amount == Decimal("275.00")
        assert order.item_for_product(99) is None

    def test_order_code_required(self):
        """Un pedido sin código no es válido."""
        with pytest.raises(ValueError):
            OrderDomain(order_date=date(2025, 9, 1), customer_id=1, order_code="")

    def test_negative_line_rejected(self):
        """Una línea con cantidad negativa no es válida."""
        with pytest.raises(ValueError):
            OrderLine(product_id=1, qty=Decimal("-1"), price=Decimal("1"))

    def test_item_qty_normalised_to_decimal(self):
        """La cantidad de un ítem debe quedar como Decimal."""
        item = OrderItemDomain(product_id=1, qty=3, price=Money.of(2))
        assert item.qty == Decimal("3")
