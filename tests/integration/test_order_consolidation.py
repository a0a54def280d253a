"""
Tests de integración del motor de consolidación de pedidos sobre SQLite.

Cada test usa un archivo de base nuevo, así que pedidos, códigos y
contadores empiezan desde cero.
"""

import warnings
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.exc import SAWarning

from smb_orders.utils.error_handler import NotFoundException, StoreException, ValidationException

pytestmark = pytest.mark.integration

DAY = "2025-09-01"


def _payload(customer_id, *lines, day=DAY, **extra):
    return {
        "date": day,
        "customerId": customer_id,
        "items": [{"productId": product_id, "qty": qty, "price": price} for product_id, qty, price in lines],
        **extra,
    }


def _assert_balanced(order):
    line_sum = sum((item.line_total.amount for item in order.items), Decimal("0"))
    assert order.subtotal.amount == line_sum
    assert order.total.amount == order.subtotal.amount + order.delivery_fee.amount


class TestCreateOrMerge:
    """Semántica de crear o consolidar para un par (fecha, cliente)."""

    @pytest.mark.asyncio
    async def test_first_call_creates_order(self, orchestrator, catalog):
        """La primera llamada para un par debe crear el pedido con código ddmmyy_1."""
        result = await orchestrator.create_or_merge(
            _payload(catalog["john"], (catalog["rice"], 2, 50), (catalog["tea"], 1, 20), deliveryFee=30)
        )

        assert result.created is True
        assert result.action == "created"
        assert result.items_inserted == 2
        assert result.order.order_code == "010925_1"
        assert result.order.subtotal.amount == Decimal("120.00")
        assert result.order.delivery_fee.amount == Decimal("30.00")
        assert result.order.total.amount == Decimal("150.00")

    @pytest.mark.asyncio
    async def test_second_call_merges_into_same_order(self, orchestrator, order_repo, catalog):
        """Una llamada posterior debe sumar cantidades y sobrescribir el precio (escenario B)."""
        first = await orchestrator.create_or_merge(
            _payload(catalog["john"], (catalog["rice"], 2, 50), (catalog["tea"], 1, 20))
        )
        second = await orchestrator.create_or_merge(_payload(catalog["john"], (catalog["rice"], 3, 55)))

        assert second.created is False
        assert second.items_merged == 1
        assert second.order.id == first.order.id
        assert second.order.order_code == first.order.order_code
        assert await order_repo.count_orders_on_date(date(2025, 9, 1)) == 1

        order = await orchestrator.get_order(first.order.id)
        rice = order.item_for_product(catalog["rice"])
        assert rice.qty == Decimal("5")
        assert rice.price.amount == Decimal("55.00")
        assert order.subtotal.amount == Decimal("295.00")
        assert order.items_count == 2
        _assert_balanced(order)

    @pytest.mark.asyncio
    async def test_same_product_twice_in_one_call(self, orchestrator, catalog):
        """Productos repetidos en una llamada deben sumarse y gana el último precio."""
        result = await orchestrator.create_or_merge(
            _payload(catalog["john"], (catalog["rice"], 2, 50), (catalog["rice"], 3, 55))
        )

        order = await orchestrator.get_order(result.order.id)
        assert order.items_count == 1
        assert order.items[0].qty == Decimal("5")
        assert order.items[0].price.amount == Decimal("55.00")
        assert result.items_inserted == 1
        assert result.items_merged == 1

    @pytest.mark.asyncio
    async def test_aggregates_stay_consistent_over_many_calls(self, orchestrator, catalog):
        """Los ítems deben igualar la suma por producto y los totales deben cuadrar."""
        calls = [
            [(catalog["rice"], 1, 50)],
            [(catalog["tea"], 2, 20), (catalog["rice"], 2, 48)],
            [(catalog["noodles"], "1.5", "40")],
            [(catalog["tea"], 1, 22)],
        ]
        order_id = None
        for lines in calls:
            result = await orchestrator.create_or_merge(_payload(catalog["mary"], *lines))
            order_id = result.order.id
            _assert_balanced(await orchestrator.get_order(order_id))

        order = await orchestrator.get_order(order_id)
        assert {item.product_id: (item.qty, item.price.amount) for item in order.items} == {
            catalog["rice"]: (Decimal("3"), Decimal("48.00")),
            catalog["tea"]: (Decimal("3"), Decimal("22.00")),
            catalog["noodles"]: (Decimal("1.5"), Decimal("40.00")),
        }

    @pytest.mark.asyncio
    async def test_empty_items_creates_nothing(self, orchestrator, catalog):
        """Una lista de ítems vacía debe fallar la validación antes de escribir."""
        with pytest.raises(ValidationException):
            await orchestrator.create_or_merge(_payload(catalog["john"]))

        assert await orchestrator.list_recent_orders() == []

    @pytest.mark.asyncio
    async def test_unknown_references_create_nothing(self, orchestrator, catalog):
        """Clientes o productos desconocidos deben reportarse como no encontrados."""
        with pytest.raises(NotFoundException) as exc_info:
            await orchestrator.create_or_merge(_payload(999, (catalog["rice"], 1, 50)))
        assert exc_info.value.resource == "customer"

        with pytest.raises(NotFoundException) as exc_info:
            await orchestrator.create_or_merge(_payload(catalog["john"], (catalog["rice"], 1, 50), (777, 1, 1)))
        assert exc_info.value.resource == "product"

        assert await orchestrator.list_recent_orders() == []

    @pytest.mark.asyncio
    async def test_failure_mid_call_rolls_back_everything(self, orchestrator, catalog):
        """Si el recálculo falla, las líneas consolidadas no deben persistir."""
        created = await orchestrator.create_or_merge(_payload(catalog["john"], (catalog["rice"], 2, 50)))

        failure = StoreException(message="disk full", operation="update_order")
        with patch.object(orchestrator.calculator, "recompute", AsyncMock(side_effect=failure)):
            with pytest.raises(StoreException):
                await orchestrator.create_or_merge(_payload(catalog["john"], (catalog["rice"], 3, 55)))

        order = await orchestrator.get_order(created.order.id)
        assert order.items[0].qty == Decimal("2")
        assert order.items[0].price.amount == Decimal("50.00")
        assert order.subtotal.amount == Decimal("100.00")


class TestDeliveryFeeAndNotes:
    """Políticas de cabecera aplicadas al consolidar."""

    @pytest.mark.asyncio
    async def test_fee_kept_unless_supplied(self, orchestrator, catalog):
        """Omitir el envío debe conservar el guardado; un 0 explícito debe reemplazarlo."""
        await orchestrator.create_or_merge(_payload(catalog["john"], (catalog["rice"], 1, 50), deliveryFee=30))

        kept = await orchestrator.create_or_merge(_payload(catalog["john"], (catalog["tea"], 1, 20)))
        assert kept.order.delivery_fee.amount == Decimal("30.00")
        assert kept.order.total.amount == Decimal("100.00")

        cleared = await orchestrator.create_or_merge(
            _payload(catalog["john"], (catalog["tea"], 1, 20), deliveryFee=0)
        )
        assert cleared.order.delivery_fee.is_zero
        assert cleared.order.total.amount == Decimal("90.00")

    @pytest.mark.asyncio
    async def test_notes_accumulate(self, orchestrator, catalog):
        """Las notas deben agregarse con el separador (escenario C)."""
        await orchestrator.create_or_merge(
            _payload(catalog["john"], (catalog["rice"], 1, 50), notes="Leave at door")
        )
        await orchestrator.create_or_merge(_payload(catalog["john"], (catalog["tea"], 1, 20), notes="No peanuts"))
        result = await orchestrator.create_or_merge(_payload(catalog["john"], (catalog["tea"], 1, 20)))

        assert result.order.notes == "Leave at door | No peanuts"


class TestOrderCodes:
    """Asignación y estabilidad de códigos de pedido."""

    @pytest.mark.asyncio
    async def test_codes_follow_creation_order_per_day(self, orchestrator, catalog):
        """Cada día debe numerar sus pedidos de forma independiente."""
        john = await orchestrator.create_or_merge(_payload(catalog["john"], (catalog["rice"], 1, 50)))
        mary = await orchestrator.create_or_merge(_payload(catalog["mary"], (catalog["rice"], 1, 50)))
        other_day = await orchestrator.create_or_merge(
            _payload(catalog["john"], (catalog["rice"], 1, 50), day="2025-09-02")
        )

        assert john.order.order_code == "010925_1"
        assert mary.order.order_code == "010925_2"
        assert other_day.order.order_code == "020925_1"

    @pytest.mark.asyncio
    async def test_codes_never_reissued_after_delete(self, orchestrator, catalog):
        """Eliminar un pedido no debe renumerar otros ni liberar su código."""
        john = await orchestrator.create_or_merge(_payload(catalog["john"], (catalog["rice"], 1, 50)))
        mary = await orchestrator.create_or_merge(_payload(catalog["mary"], (catalog["rice"], 1, 50)))

        await orchestrator.delete_order(john.order.id)
        peter = await orchestrator.create_or_merge(_payload(catalog["peter"], (catalog["rice"], 1, 50)))

        assert peter.order.order_code == "010925_3"
        assert (await orchestrator.get_order(mary.order.id)).order_code == "010925_2"

    @pytest.mark.asyncio
    async def test_sequence_seeded_from_existing_orders(self, order_repo, catalog):
        """La primera asignación de un día debe contar los pedidos ya guardados."""
        day = date(2025, 9, 5)
        await order_repo.insert_order_if_absent(day, catalog["john"], "legacy_1", Decimal("0"), "")

        assert await order_repo.next_code_sequence(day) == 2
        assert await order_repo.next_code_sequence(day) == 3

    @pytest.mark.asyncio
    async def test_insert_if_absent_reports_conflict(self, order_repo, catalog):
        """Un segundo insert para el mismo par debe devolver None en vez de fallar."""
        day = date(2025, 9, 6)
        first = await order_repo.insert_order_if_absent(day, catalog["john"], "060925_1", Decimal("0"), "")
        second = await order_repo.insert_order_if_absent(day, catalog["john"], "060925_2", Decimal("0"), "")

        assert first is not None
        assert second is None


class TestReplaceOrder:
    """Reemplazo total de pedidos."""

    @pytest.mark.asyncio
    async def test_replace_items_and_header(self, orchestrator, catalog):
        """Los ítems viejos deben desaparecer y los totales salir de la lista nueva (escenario E)."""
        created = await orchestrator.create_or_merge(
            _payload(
                catalog["john"],
                (catalog["rice"], 1, 50),
                (catalog["tea"], 2, 20),
                deliveryFee=30,
                notes="Leave at door",
            )
        )

        order = await orchestrator.replace_order(
            created.order.id,
            {"date": DAY, "customerId": catalog["john"], "items": [{"productId": catalog["noodles"], "qty": 1, "price": 40}]},
        )

        detail = await orchestrator.get_order(created.order.id)
        assert [item.product_id for item in detail.items] == [catalog["noodles"]]
        assert detail.subtotal.amount == Decimal("40.00")
        assert detail.delivery_fee.is_zero
        assert detail.total.amount == Decimal("40.00")
        assert detail.notes == ""
        assert detail.order_code == created.order.order_code
        assert order.total.amount == Decimal("40.00")

    @pytest.mark.asyncio
    async def test_replace_keeps_duplicate_products(self, orchestrator, catalog):
        """El reemplazo debe insertar las líneas tal cual, sin consolidar."""
        created = await orchestrator.create_or_merge(_payload(catalog["john"], (catalog["rice"], 1, 50)))

        await orchestrator.replace_order(
            created.order.id,
            _payload(catalog["john"], (catalog["rice"], 1, 50), (catalog["rice"], 2, 50), deliveryFee=10),
        )

        detail = await orchestrator.get_order(created.order.id)
        assert detail.items_count == 2
        assert detail.subtotal.amount == Decimal("150.00")
        assert detail.total.amount == Decimal("160.00")

    @pytest.mark.asyncio
    async def test_replace_with_empty_items(self, orchestrator, catalog):
        """Una lista vacía debe dejar el pedido sin ítems y subtotal cero."""
        created = await orchestrator.create_or_merge(_payload(catalog["john"], (catalog["rice"], 1, 50)))

        await orchestrator.replace_order(created.order.id, {"date": DAY, "customerId": catalog["john"], "items": []})

        detail = await orchestrator.get_order(created.order.id)
        assert detail.items == []
        assert detail.subtotal.is_zero

    @pytest.mark.asyncio
    async def test_replace_collision_is_rejected(self, orchestrator, catalog):
        """Mover un pedido a un par que ya tiene uno debe violar la restricción única."""
        await orchestrator.create_or_merge(_payload(catalog["john"], (catalog["rice"], 1, 50)))
        mary = await orchestrator.create_or_merge(_payload(catalog["mary"], (catalog["tea"], 1, 20)))

        with pytest.raises(StoreException) as exc_info:
            await orchestrator.replace_order(
                mary.order.id, _payload(catalog["john"], (catalog["noodles"], 1, 40))
            )

        assert exc_info.value.constraint_violation is True
        assert exc_info.value.status_code == 409

        unchanged = await orchestrator.get_order(mary.order.id)
        assert unchanged.customer_id == catalog["mary"]
        assert [item.product_id for item in unchanged.items] == [catalog["tea"]]

    @pytest.mark.asyncio
    async def test_replace_missing_order(self, orchestrator, catalog):
        """Reemplazar un pedido inexistente debe reportarse como no encontrado."""
        with pytest.raises(NotFoundException):
            await orchestrator.replace_order(404, _payload(catalog["john"], (catalog["rice"], 1, 50)))


class TestDeleteOrder:
    """Eliminación en cascada."""

    @pytest.mark.asyncio
    async def test_delete_removes_items(self, orchestrator, order_repo, catalog):
        """Eliminar un pedido no debe dejar ítems que lo referencien (escenario D)."""
        created = await orchestrator.create_or_merge(
            _payload(catalog["john"], (catalog["rice"], 1, 50), (catalog["tea"], 2, 20))
        )

        await orchestrator.delete_order(created.order.id)

        assert await order_repo.get_items([created.order.id]) == {}
        with pytest.raises(NotFoundException):
            await orchestrator.get_order(created.order.id)

    @pytest.mark.asyncio
    async def test_delete_missing_order(self, orchestrator):
        """Eliminar un pedido inexistente debe reportarse como no encontrado."""
        with pytest.raises(NotFoundException):
            await orchestrator.delete_order(12345)

    @pytest.mark.asyncio
    async def test_delete_requires_id(self, orchestrator):
        """Un id ausente debe fallar la validación."""
        with pytest.raises(ValidationException):
            await orchestrator.delete_order(None)


class TestReadViews:
    """Operaciones de listado."""

    @pytest.mark.asyncio
    async def test_months_days_and_day_listing(self, orchestrator, catalog):
        """Meses y días deben venir del más nuevo al más viejo; un día lista sus pedidos por id."""
        await orchestrator.create_or_merge(_payload(catalog["john"], (catalog["rice"], 1, 50), day="2025-09-01"))
        await orchestrator.create_or_merge(_payload(catalog["mary"], (catalog["tea"], 2, 20), day="2025-09-01"))
        await orchestrator.create_or_merge(_payload(catalog["john"], (catalog["rice"], 1, 50), day="2025-09-15"))
        await orchestrator.create_or_merge(_payload(catalog["john"], (catalog["rice"], 1, 50), day="2025-10-02"))

        assert await orchestrator.list_months() == ["2025-10", "2025-09"]
        assert await orchestrator.list_days("2025-09") == ["2025-09-15", "2025-09-01"]
        assert await orchestrator.list_days("2025-11") == []

        orders = await orchestrator.list_orders_by_date(DAY)
        assert [order.customer_name for order in orders] == ["John", "Mary"]
        assert [item.product_name for item in orders[1].items] == ["Tea"]

    @pytest.mark.asyncio
    async def test_date_listings_compile_without_warnings(self, orchestrator, catalog):
        """Listar meses y días no debe emitir advertencias de SQLAlchemy."""
        await orchestrator.create_or_merge(_payload(catalog["john"], (catalog["rice"], 1, 50)))

        with warnings.catch_warnings():
            warnings.simplefilter("error", SAWarning)
            assert await orchestrator.list_months() == ["2025-09"]
            assert await orchestrator.list_days("2025-09") == [DAY]

    @pytest.mark.asyncio
    async def test_recent_orders_newest_first(self, orchestrator, catalog):
        """Los pedidos recientes deben ordenarse por id descendente y respetar el límite."""
        ids = []
        for day in ("2025-09-01", "2025-09-02", "2025-09-03"):
            result = await orchestrator.create_or_merge(_payload(catalog["john"], (catalog["rice"], 1, 50), day=day))
            ids.append(result.order.id)

        recent = await orchestrator.list_recent_orders()
        assert [order.id for order in recent] == list(reversed(ids))
        assert recent[0].items == []
        assert len(await orchestrator.list_recent_orders(limit=2)) == 2

    @pytest.mark.asyncio
    async def test_order_detail_has_customer_contact(self, orchestrator, catalog):
        """El detalle debe incluir los datos de contacto del cliente."""
        created = await orchestrator.create_or_merge(_payload(catalog["john"], (catalog["rice"], 1, 50)))

        order = await orchestrator.get_order(created.order.id)

        assert order.customer_name == "John"
        assert order.customer_phone == "0812345678"
        assert order.customer_address == "12 Sukhumvit"

    @pytest.mark.asyncio
    async def test_bad_month_rejected(self, orchestrator):
        """Un mes mal formado debe fallar la validación."""
        with pytest.raises(ValidationException):
            await orchestrator.list_days("September")
