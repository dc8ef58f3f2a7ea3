from bitbasis.domain.enums import HoldingTerm, TaxMethod


class TestEnumsAreStringMixin:
    """Enums use (str, Enum) so they serialize to strings in JSON and DB."""

    def test_tax_method_is_str(self):
        assert isinstance(TaxMethod.FIFO, str)
        assert TaxMethod.FIFO == "fifo"

    def test_holding_term_is_str(self):
        assert isinstance(HoldingTerm.LONG, str)
        assert HoldingTerm.LONG == "long"


class TestEnumMembers:
    def test_tax_methods(self):
        assert [m.value for m in TaxMethod] == ["fifo", "lifo", "hifo"]

    def test_holding_terms(self):
        assert len(HoldingTerm) == 2
