"""Tests unitarios para la generación de códigos de pedido."""

from datetime import date
from unittest.mock import AsyncMock, MagicMock

import pytest

from smb_orders.services.orders.generators import OrderCodeGenerator, format_order_code


class TestFormatOrderCode:
    """Tests para format_order_code."""

    def test_first_order_of_the_day(self):
        """Debe formatear la fecha como ddmmyy seguida de la secuencia."""
        assert format_order_code(date(2025, 9, 1), 1) == "010925_1"

    def test_multi_digit_sequence(self):
        """La secuencia no debe rellenarse con ceros."""
        assert format_order_code(date(2025, 12, 31), 12) == "311225_12"

    def test_rejects_non_positive_sequence(self):
        """Debe rechazar secuencias menores a 1."""
        with pytest.raises(ValueError):
            format_order_code(date(2025, 9, 1), 0)


class TestOrderCodeGenerator:
    """Tests para OrderCodeGenerator con repositorio simulado."""

    @pytest.mark.asyncio
    async def test_uses_sequence_from_repository(self):
        """Debe pedir la secuencia al repositorio dentro de la misma sesión."""
        repo = MagicMock()
        repo.next_code_sequence = AsyncMock(return_value=3)
        session = MagicMock()

        code = await OrderCodeGenerator(order_repo=repo).generate(date(2025, 9, 1), session=session)

        assert code == "010925_3"
        repo.next_code_sequence.assert_awaited_once_with(date(2025, 9, 1), session=session)
