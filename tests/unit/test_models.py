"""Tests for domain models."""

import uuid
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from pydantic import ValidationError

from bitbasis.domain.enums.tax import HoldingTerm
from bitbasis.domain.models.tax import (
    Disposal,
    Lot,
    RealizedGainFragment,
    TaxLiability,
    fits_quantity_scale,
    quantize_money,
    to_naive_utc,
)


class TestLot:
    def test_remaining_defaults_to_quantity(self):
        lot = Lot(quantity=Decimal("0.3"), cost_basis_per_unit=Decimal("42000"), acquired_at=datetime(2024, 1, 1))
        assert lot.remaining_quantity == Decimal("0.3")
        assert lot.is_open

    def test_from_purchase_capitalises_fee(self):
        lot = Lot.from_purchase(
            quantity=Decimal("0.5"),
            fiat_spent=Decimal("20000"),
            fee=Decimal("50"),
            acquired_at=datetime(2024, 1, 1),
        )
        assert lot.cost_basis_per_unit == Decimal("40100")

    def test_from_purchase_keeps_id(self):
        lot_id = uuid.uuid4()
        lot = Lot.from_purchase(Decimal("1"), Decimal("100"), datetime(2024, 1, 1), lot_id=lot_id)
        assert lot.id == lot_id

    def test_aware_timestamp_normalised_to_naive_utc(self):
        ts = datetime(2024, 1, 1, 9, tzinfo=timezone(timedelta(hours=9)))
        lot = Lot(quantity=Decimal("1"), cost_basis_per_unit=Decimal("1"), acquired_at=ts)
        assert lot.acquired_at == datetime(2024, 1, 1, 0, 0)
        assert lot.acquired_at.tzinfo is None


class TestDisposal:
    def test_from_sale(self):
        d = Disposal.from_sale(Decimal("0.25"), Decimal("15000"), datetime(2024, 2, 1))
        assert d.proceeds_per_unit == Decimal("60000")

    def test_iso_string_timestamp(self):
        d = Disposal(quantity=Decimal("1"), proceeds_per_unit=Decimal("1"), disposed_at="2024-02-01T12:00:00Z")
        assert d.disposed_at == datetime(2024, 2, 1, 12)


class TestRealizedGainFragment:
    def test_frozen(self):
        f = RealizedGainFragment(
            lot_id=uuid.uuid4(),
            disposal_id=uuid.uuid4(),
            quantity_matched=Decimal("1"),
            cost_basis=Decimal("1"),
            proceeds=Decimal("2"),
            gain=Decimal("1"),
            holding_period_days=1,
            term=HoldingTerm.SHORT,
            acquired_at=datetime(2024, 1, 1),
            disposed_at=datetime(2024, 1, 2),
        )
        with pytest.raises(ValidationError):
            f.gain = Decimal("5")


class TestTaxLiability:
    def test_total(self):
        t = TaxLiability(short_term_liability=Decimal("1.5"), long_term_liability=Decimal("2.5"))
        assert t.total_liability == Decimal("4.0")


def test_to_naive_utc_passes_naive_through():
    ts = datetime(2024, 1, 1, 3)
    assert to_naive_utc(ts) is ts


class TestMoneyScale:
    def test_derived_cost_basis_quantized(self):
        lot = Lot.from_purchase(Decimal("3"), Decimal("100000"), datetime(2024, 1, 1))
        assert lot.cost_basis_per_unit == Decimal("33333.33333333")

    def test_derived_proceeds_quantized(self):
        d = Disposal.from_sale(Decimal("0.75"), Decimal("10000"), datetime(2024, 2, 1))
        assert d.proceeds_per_unit == Decimal("13333.33333333")

    def test_quantize_money_half_even(self):
        assert quantize_money(Decimal("0.000000005")) == Decimal("0")
        assert quantize_money(Decimal("0.000000015")) == Decimal("0.00000002")

    def test_quantize_money_leaves_nan(self):
        assert quantize_money(Decimal("NaN")).is_nan()

    def test_quantity_scale(self):
        assert fits_quantity_scale(Decimal("0.000000000000000001"))
        assert fits_quantity_scale(Decimal("1.50000000000000000000"))
        assert not fits_quantity_scale(Decimal("0.0000000000000000001"))
        assert not fits_quantity_scale(Decimal("Infinity"))
