"""Tests unitarios para CustomerDomain."""

import pytest

from smb_orders.domain.models import CustomerDomain


class TestCustomerDomain:
    """Tests para el modelo de cliente."""

    def test_name_is_trimmed(self):
        """Debe recortar espacios del nombre."""
        assert CustomerDomain(name="  John ").name == "John"

    def test_blank_name_rejected(self):
        """Un nombre vacío no debe ser aceptado."""
        with pytest.raises(ValueError):
            CustomerDomain(name="   ")

    def test_missing_contact_fields(self):
        """Debe listar solo los campos de contacto vacíos."""
        customer = CustomerDomain.from_dict({"id": 1, "name": "Mary", "phone": "0811111111", "address": None})

        assert customer.missing_contact_fields == ["address"]
        assert CustomerDomain(name="Peter", phone=" ", address="Silom").missing_contact_fields == ["phone"]
