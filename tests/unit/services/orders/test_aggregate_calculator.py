"""Tests unitarios para el recálculo de agregados de pedidos."""

from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from smb_orders.services.orders.managers import AggregateCalculator, resolve_delivery_fee
from smb_orders.utils.error_handler import NotFoundException


def _repo(stored_fee="40", line_sum="120"):
    repo = MagicMock()
    repo.get_order_by_id = AsyncMock(return_value={"id": 1, "delivery_fee": Decimal(stored_fee)})
    repo.sum_line_totals = AsyncMock(return_value=Decimal(line_sum))
    repo.update_order = AsyncMock(return_value=True)
    return repo


class TestResolveDeliveryFee:
    """Tests para la política de costo de envío en fusiones."""

    def test_supplied_fee_replaces_stored(self):
        """Un costo enviado debe reemplazar al guardado."""
        assert resolve_delivery_fee(Decimal("25"), Decimal("40")) == Decimal("25")

    def test_supplied_zero_replaces_stored(self):
        """Un costo 0 explícito también debe reemplazar al guardado."""
        assert resolve_delivery_fee(Decimal("0"), Decimal("40")) == Decimal("0")

    def test_missing_fee_keeps_stored(self):
        """Sin costo enviado debe conservarse el guardado."""
        assert resolve_delivery_fee(None, Decimal("40")) == Decimal("40")
        assert resolve_delivery_fee(None, None) == Decimal("0")


class TestAggregateCalculator:
    """Tests para AggregateCalculator."""

    def test_compute_total_is_subtotal_plus_fee(self):
        """El total debe ser subtotal más costo de envío, a dos decimales."""
        aggregates = AggregateCalculator(order_repo=MagicMock()).compute(Decimal("295"), Decimal("20"))

        assert aggregates.subtotal.amount == Decimal("295.00")
        assert aggregates.delivery_fee.amount == Decimal("20.00")
        assert aggregates.total.amount == Decimal("315.00")

    def test_compute_rounds_half_up(self):
        """Los montos deben redondearse a centavos hacia arriba en .5."""
        aggregates = AggregateCalculator(order_repo=MagicMock()).compute(Decimal("10.005"), Decimal("0"))

        assert aggregates.subtotal.amount == Decimal("10.01")

    @pytest.mark.asyncio
    async def test_recompute_keeps_stored_fee(self):
        """Sin costo nuevo debe recalcular con el costo guardado."""
        repo = _repo()
        session = MagicMock()

        aggregates = await AggregateCalculator(order_repo=repo).recompute(1, session)

        assert aggregates.total.amount == Decimal("160.00")
        repo.update_order.assert_awaited_once_with(
            1, session=session, subtotal=Decimal("120"), delivery_fee=Decimal("40"), total=Decimal("160")
        )

    @pytest.mark.asyncio
    async def test_recompute_with_fee_override(self):
        """Un costo enviado debe guardarse y entrar en el total."""
        repo = _repo()

        aggregates = await AggregateCalculator(order_repo=repo).recompute(1, MagicMock(), delivery_fee=Decimal("0"))

        assert aggregates.delivery_fee.is_zero
        assert aggregates.total.amount == Decimal("120.00")

    @pytest.mark.asyncio
    async def test_recompute_missing_order(self):
        """Debe lanzar NotFoundException si el pedido no existe."""
        repo = _repo()
        repo.get_order_by_id = AsyncMock(return_value=None)

        with pytest.raises(NotFoundException):
            await AggregateCalculator(order_repo=repo).recompute(99, MagicMock())

        repo.update_order.assert_not_awaited()
