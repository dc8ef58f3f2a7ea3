"""Tests for FIFO / LIFO / HIFO disposal matching: pure functions."""

from collections import defaultdict
from datetime import datetime
from decimal import Decimal

import pytest

from bitbasis.accounting.ledger import LotLedger
from bitbasis.accounting.matcher import (
    AVERAGE_COST,
    average_cost_gain,
    compare_methods,
    match_disposal,
    order_candidates,
    replay_history,
)
from bitbasis.domain.enums.tax import HoldingTerm, TaxMethod
from bitbasis.domain.models.tax import Disposal, Lot
from bitbasis.exceptions import InsufficientBasis, InvalidDisposal


def _lot(qty: str, cost: str, day: datetime) -> Lot:
    return Lot(quantity=Decimal(qty), cost_basis_per_unit=Decimal(cost), acquired_at=day)


def _disposal(qty: str, price: str, day: datetime) -> Disposal:
    return Disposal(quantity=Decimal(qty), proceeds_per_unit=Decimal(price), disposed_at=day)


@pytest.fixture()
def example_lots() -> tuple[Lot, Lot]:
    lot1 = _lot("10", "10000", datetime(2022, 1, 1))
    lot2 = _lot("5", "30000", datetime(2023, 6, 1))
    return lot1, lot2


@pytest.fixture()
def example_disposal() -> Disposal:
    return _disposal("12", "50000", datetime(2024, 1, 2))


class TestWorkedExample:
    def test_fifo(self, example_lots, example_disposal):
        lot1, lot2 = example_lots
        ledger = LotLedger([lot1, lot2])

        fragments = match_disposal(ledger, example_disposal, TaxMethod.FIFO)

        assert len(fragments) == 2
        first, second = fragments
        assert first.lot_id == lot1.id
        assert first.quantity_matched == Decimal("10")
        assert first.cost_basis == Decimal("100000")
        assert first.proceeds == Decimal("500000")
        assert first.gain == Decimal("400000")
        assert first.term == HoldingTerm.LONG

        assert second.lot_id == lot2.id
        assert second.quantity_matched == Decimal("2")
        assert second.cost_basis == Decimal("60000")
        assert second.proceeds == Decimal("100000")
        assert second.gain == Decimal("40000")
        assert second.holding_period_days == 215
        assert second.term == HoldingTerm.SHORT

        assert lot1.remaining_quantity == Decimal("0")
        assert lot2.remaining_quantity == Decimal("3")

    def test_hifo(self, example_lots, example_disposal):
        lot1, lot2 = example_lots
        ledger = LotLedger([lot1, lot2])

        fragments = match_disposal(ledger, example_disposal, TaxMethod.HIFO)

        assert [(f.lot_id, f.quantity_matched) for f in fragments] == [
            (lot2.id, Decimal("5")),
            (lot1.id, Decimal("7")),
        ]
        assert fragments[0].gain == Decimal("100000")
        assert fragments[1].gain == Decimal("280000")
        assert lot1.remaining_quantity == Decimal("3")
        assert lot2.remaining_quantity == Decimal("0")

    def test_lifo(self, example_lots, example_disposal):
        lot1, lot2 = example_lots
        ledger = LotLedger([lot1, lot2])

        fragments = match_disposal(ledger, example_disposal, TaxMethod.LIFO)

        assert [f.lot_id for f in fragments] == [lot2.id, lot1.id]
        assert fragments[1].quantity_matched == Decimal("7")

    def test_fragments_carry_disposal_id(self, example_lots, example_disposal):
        fragments = match_disposal(LotLedger(list(example_lots)), example_disposal, TaxMethod.FIFO)
        assert {f.disposal_id for f in fragments} == {example_disposal.id}


class TestOrdering:
    def _lots(self) -> list[Lot]:
        return [
            _lot("1", "20000", datetime(2021, 1, 1)),
            _lot("1", "60000", datetime(2021, 11, 1)),
            _lot("1", "60000", datetime(2021, 3, 1)),
            _lot("1", "40000", datetime(2023, 1, 1)),
        ]

    def test_fifo_non_decreasing_dates(self):
        ordered = order_candidates(self._lots(), TaxMethod.FIFO)
        dates = [lot.acquired_at for lot in ordered]
        assert dates == sorted(dates)

    def test_lifo_non_increasing_dates(self):
        ordered = order_candidates(self._lots(), TaxMethod.LIFO)
        dates = [lot.acquired_at for lot in ordered]
        assert dates == sorted(dates, reverse=True)

    def test_hifo_highest_cost_first_older_wins_tie(self):
        ordered = order_candidates(self._lots(), TaxMethod.HIFO)
        assert [(lot.cost_basis_per_unit, lot.acquired_at) for lot in ordered] == [
            (Decimal("60000"), datetime(2021, 3, 1)),
            (Decimal("60000"), datetime(2021, 11, 1)),
            (Decimal("40000"), datetime(2023, 1, 1)),
            (Decimal("20000"), datetime(2021, 1, 1)),
        ]

    def test_accepts_string_method(self):
        ordered = order_candidates(self._lots(), "lifo")
        assert ordered[0].acquired_at == datetime(2023, 1, 1)

    def test_consumption_follows_method_order(self):
        lots = self._lots()
        ledger = LotLedger(lots)
        fragments = match_disposal(ledger, _disposal("2.5", "50000", datetime(2024, 6, 1)), TaxMethod.HIFO)
        costs = [f.cost_basis / f.quantity_matched for f in fragments]
        assert costs == sorted(costs, reverse=True)
        assert fragments[-1].quantity_matched == Decimal("0.5")


class TestAtomicity:
    def test_insufficient_basis_leaves_ledger_unchanged(self, example_lots):
        lot1, lot2 = example_lots
        ledger = LotLedger([lot1, lot2])

        with pytest.raises(InsufficientBasis) as exc_info:
            match_disposal(ledger, _disposal("15.00000001", "50000", datetime(2024, 1, 2)), TaxMethod.FIFO)

        assert exc_info.value.available == Decimal("15")
        assert lot1.remaining_quantity == Decimal("10")
        assert lot2.remaining_quantity == Decimal("5")

    def test_lots_after_disposal_date_do_not_count(self, example_lots):
        lot1, lot2 = example_lots
        ledger = LotLedger([lot1, lot2])

        # lot2 is acquired on 2023-06-01, after this disposal
        with pytest.raises(InsufficientBasis):
            match_disposal(ledger, _disposal("11", "50000", datetime(2023, 1, 1)), TaxMethod.LIFO)
        assert lot1.remaining_quantity == Decimal("10")

    def test_empty_ledger(self):
        with pytest.raises(InsufficientBasis):
            match_disposal(LotLedger(), _disposal("1", "50000", datetime(2024, 1, 1)), TaxMethod.FIFO)

    @pytest.mark.parametrize("qty", ["0", "-1"])
    def test_non_positive_disposal_rejected(self, example_lots, qty):
        with pytest.raises(InvalidDisposal):
            match_disposal(LotLedger(list(example_lots)), _disposal(qty, "50000", datetime(2024, 1, 2)), TaxMethod.FIFO)

    def test_negative_proceeds_rejected(self, example_lots):
        with pytest.raises(InvalidDisposal):
            match_disposal(LotLedger(list(example_lots)), _disposal("1", "-1", datetime(2024, 1, 2)), TaxMethod.FIFO)


class TestQuantityInvariants:
    def test_sums_match_across_disposals(self):
        lots = [
            _lot("0.5", "16000", datetime(2020, 3, 1)),
            _lot("1.25", "9000", datetime(2020, 9, 1)),
            _lot("0.75", "45000", datetime(2021, 5, 1)),
            _lot("2", "30000", datetime(2022, 2, 1)),
        ]
        disposals = [
            _disposal("0.6", "50000", datetime(2021, 6, 1)),
            _disposal("1.1", "42000", datetime(2022, 3, 1)),
            _disposal("0.9", "61000", datetime(2024, 3, 1)),
        ]

        for method in TaxMethod:
            fragments, ledger = replay_history(lots, disposals, method)

            by_disposal: dict = defaultdict(Decimal)
            by_lot: dict = defaultdict(Decimal)
            for f in fragments:
                by_disposal[f.disposal_id] += f.quantity_matched
                by_lot[f.lot_id] += f.quantity_matched

            for d in disposals:
                assert by_disposal[d.id] == d.quantity
            for lot in ledger.lots:
                assert lot.quantity - lot.remaining_quantity == by_lot[lot.id]

    def test_partial_lot_across_two_disposals(self):
        lot = _lot("1", "10000", datetime(2022, 1, 1))
        ledger = LotLedger([lot])
        f1 = match_disposal(ledger, _disposal("0.25", "20000", datetime(2022, 6, 1)), TaxMethod.FIFO)
        f2 = match_disposal(ledger, _disposal("0.5", "30000", datetime(2023, 6, 1)), TaxMethod.FIFO)

        assert f1[0].gain == Decimal("2500")
        assert f2[0].gain == Decimal("10000")
        assert f2[0].term == HoldingTerm.LONG
        assert lot.remaining_quantity == Decimal("0.25")


class TestReplayAndCompare:
    def test_replay_does_not_mutate_inputs(self, example_lots, example_disposal):
        lot1, lot2 = example_lots
        replay_history([lot1, lot2], [example_disposal], TaxMethod.FIFO)
        assert lot1.remaining_quantity == Decimal("10")
        assert lot2.remaining_quantity == Decimal("5")

    def test_replay_orders_disposals_by_date(self):
        lot = _lot("1", "10000", datetime(2022, 1, 1))
        late = _disposal("0.5", "40000", datetime(2024, 1, 1))
        early = _disposal("0.5", "20000", datetime(2023, 1, 1))
        fragments, _ = replay_history([lot], [late, early], TaxMethod.FIFO)
        assert [f.disposal_id for f in fragments] == [early.id, late.id]

    def test_compare_methods(self, example_lots, example_disposal):
        totals = compare_methods(list(example_lots), [example_disposal])
        assert totals[TaxMethod.FIFO] == Decimal("440000")
        assert totals[TaxMethod.HIFO] == Decimal("380000")
        assert totals[TaxMethod.LIFO] == Decimal("380000")
        assert totals[AVERAGE_COST] == Decimal("400000")


class TestAverageCost:
    def test_uses_average_of_all_purchases(self, example_lots, example_disposal):
        # (100k + 150k) / 15 BTC, 12 sold at 50k
        assert average_cost_gain(list(example_lots), [example_disposal]) == Decimal("400000")

    def test_does_not_consume_lots(self, example_lots, example_disposal):
        lot1, lot2 = example_lots
        average_cost_gain([lot1, lot2], [example_disposal])
        assert lot1.remaining_quantity == Decimal("10")
        assert lot2.remaining_quantity == Decimal("5")

    def test_no_disposals(self, example_lots):
        assert average_cost_gain(list(example_lots), []) == Decimal("0")

    def test_oversell_raises(self, example_lots):
        with pytest.raises(InsufficientBasis):
            average_cost_gain(list(example_lots), [_disposal("16", "50000", datetime(2024, 1, 2))])


class TestMoneyRounding:
    def test_fragment_amounts_quantized(self):
        lot = Lot.from_purchase(Decimal("3"), Decimal("100000"), datetime(2022, 1, 1))
        ledger = LotLedger([lot])
        disposal = Disposal.from_sale(Decimal("0.12345678"), Decimal("5000"), datetime(2024, 1, 2))

        (fragment,) = match_disposal(ledger, disposal, TaxMethod.FIFO)

        assert fragment.cost_basis == Decimal("4115.22600000")
        assert fragment.cost_basis.as_tuple().exponent == -8
        assert fragment.proceeds.as_tuple().exponent == -8
        assert fragment.gain == fragment.proceeds - fragment.cost_basis

    def test_quantity_finer_than_scale_rejected(self):
        ledger = LotLedger([_lot("1", "10000", datetime(2022, 1, 1))])
        with pytest.raises(InvalidDisposal):
            match_disposal(ledger, _disposal("0.0000000000000000001", "1", datetime(2023, 1, 1)), TaxMethod.FIFO)
