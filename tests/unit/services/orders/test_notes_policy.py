"""Tests unitarios para la política de fusión de notas."""

from smb_orders.services.orders.policies import merge_notes


class TestMergeNotes:
    """Tests para merge_notes."""

    def test_appends_incoming_after_existing(self):
        """Debe concatenar las notas con el separador por defecto."""
        assert merge_notes("Leave at door", "No peanuts") == "Leave at door | No peanuts"

    def test_empty_existing_takes_incoming(self):
        """Debe usar la nota entrante si no hay nota guardada."""
        assert merge_notes("", "No peanuts") == "No peanuts"
        assert merge_notes(None, "No peanuts") == "No peanuts"

    def test_empty_incoming_keeps_existing(self):
        """Debe conservar la nota guardada si la entrante está vacía."""
        assert merge_notes("Leave at door", "") == "Leave at door"
        assert merge_notes("Leave at door", None) == "Leave at door"

    def test_both_empty(self):
        """Debe devolver cadena vacía si ambas notas están vacías."""
        assert merge_notes(None, None) == ""
        assert merge_notes("", "") == ""

    def test_whitespace_only_counts_as_empty(self):
        """Las notas con solo espacios no deben generar separadores."""
        assert merge_notes("Leave at door", "   ") == "Leave at door"
        assert merge_notes("  ", "No peanuts") == "No peanuts"

    def test_no_deduplication(self):
        """La misma nota fusionada dos veces debe quedar repetida."""
        assert merge_notes("Call first", "Call first") == "Call first | Call first"

    def test_custom_separator(self):
        """Debe respetar un separador configurado."""
        assert merge_notes("a", "b", separator="; ") == "a; b"
