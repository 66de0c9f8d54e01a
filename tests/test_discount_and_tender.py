"""Tests for the discount resolver and the tender ledger."""

from __future__ import annotations

from decimal import Decimal

import pytest
from returns.result import Failure, Success

from pos_checkout.core.domain.model.discount import DiscountResolver
from pos_checkout.core.domain.model.errors import InvalidInput
from pos_checkout.core.domain.model.tender import (
    TenderLedger,
    TenderMethod,
    TenderMode,
)

D = Decimal


class TestDiscountResolver:
    def test_defaults_to_zero(self):
        assert DiscountResolver().effective_discount(D("350")) == D("0")

    @pytest.mark.parametrize("flat", ["350", "400", "1000000"])
    def test_over_discount_is_floored_at_subtotal(self, flat):
        resolver = DiscountResolver()
        resolver.set_flat_amount(flat)

        assert resolver.effective_discount(D("350")) == D("350")

    def test_amount_is_not_clamped_at_entry(self):
        resolver = DiscountResolver()
        resolver.set_flat_amount("400")

        assert resolver.flat_amount == D("400")

    def test_negative_amount_is_rejected(self):
        resolver = DiscountResolver()
        resolver.set_flat_amount("20")

        result = resolver.set_flat_amount("-5")

        assert isinstance(result, Failure)
        assert isinstance(result.failure(), InvalidInput)
        assert resolver.flat_amount == D("20")

    def test_empty_input_means_zero(self):
        resolver = DiscountResolver()
        resolver.set_flat_amount("20")

        resolver.set_flat_amount("")

        assert resolver.flat_amount == D("0")

    def test_apply_suggested_overwrites_flat_amount(self):
        resolver = DiscountResolver()
        resolver.set_flat_amount("10")

        result = resolver.apply_suggested(D("350"), D("5"))

        assert result == Success(D("17.50"))
        assert resolver.flat_amount == D("17.50")

    def test_apply_suggested_requires_positive_percentage(self):
        resolver = DiscountResolver()

        result = resolver.apply_suggested(D("350"), D("0"))

        assert isinstance(result.failure(), InvalidInput)
        assert resolver.flat_amount == D("0")

    def test_suggestion_is_advisory_only(self):
        resolver = DiscountResolver()
        resolver.offer(D("10"))

        assert resolver.suggested_amount(D("200")) == D("20.00")
        assert resolver.effective_discount(D("200")) == D("0")


class TestTenderLedger:
    def test_default_is_single_cash(self):
        ledger = TenderLedger()

        assert ledger.mode is TenderMode.SINGLE
        assert ledger.single_method is TenderMethod.CASH
        assert ledger.is_complete(D("350"))
        assert ledger.total_tendered(D("350")) == D("350")
        assert ledger.remaining(D("350")) == D("0")

    def test_split_exact_is_complete(self):
        ledger = TenderLedger()
        ledger.select_split()
        ledger.set_split_amount(TenderMethod.CASH, "200")
        ledger.set_split_amount(TenderMethod.BANK, "150")

        assert ledger.total_tendered(D("350")) == D("350")
        assert ledger.is_complete(D("350"))
        assert not ledger.is_overpaid(D("350"))

    def test_split_overpaid(self):
        ledger = TenderLedger()
        ledger.select_split()
        ledger.set_split_amount(TenderMethod.CASH, "200")
        ledger.set_split_amount(TenderMethod.BANK, "150")
        ledger.set_split_amount(TenderMethod.MOBILE, "10")

        assert ledger.total_tendered(D("350")) == D("360")
        assert ledger.remaining(D("350")) == D("-10")
        assert ledger.is_overpaid(D("350"))
        assert not ledger.is_complete(D("350"))

    def test_within_epsilon_is_complete(self):
        ledger = TenderLedger()
        ledger.select_split()
        ledger.set_split_amount(TenderMethod.CASH, "349.995")

        assert ledger.is_complete(D("350"))

    def test_negative_split_keeps_previous_value(self):
        ledger = TenderLedger()
        ledger.set_split_amount(TenderMethod.BANK, "40")

        result = ledger.set_split_amount(TenderMethod.BANK, "-1")

        assert isinstance(result.failure(), InvalidInput)
        assert ledger.split_amounts[TenderMethod.BANK] == D("40")

    def test_pay_remainder_is_idempotent(self):
        ledger = TenderLedger()
        ledger.select_split()
        ledger.set_split_amount(TenderMethod.BANK, "100")

        ledger.pay_remainder(TenderMethod.CASH, D("350"))
        first = dict(ledger.split_amounts)
        ledger.pay_remainder(TenderMethod.CASH, D("350"))

        assert first[TenderMethod.CASH] == D("250")
        assert ledger.is_complete(D("350"))
        assert dict(ledger.split_amounts) == first

    def test_pay_remainder_floors_at_zero(self):
        ledger = TenderLedger()
        ledger.select_split()
        ledger.set_split_amount(TenderMethod.BANK, "400")

        assert ledger.pay_remainder(TenderMethod.MOBILE, D("350")) == D("0")

    def test_switching_modes_keeps_split_entries(self):
        ledger = TenderLedger()
        ledger.select_split()
        ledger.set_split_amount(TenderMethod.CASH, "120")

        ledger.select_single(TenderMethod.BANK)
        assert ledger.is_complete(D("350"))
        ledger.select_split()

        assert ledger.split_amounts[TenderMethod.CASH] == D("120")

    def test_clear_and_reset(self):
        ledger = TenderLedger()
        ledger.select_split()
        ledger.set_split_amount(TenderMethod.CASH, "120")

        ledger.clear()
        assert ledger.mode is TenderMode.SPLIT
        assert ledger.split_total() == D("0")

        ledger.select_single(TenderMethod.MOBILE)
        ledger.reset()
        assert ledger.mode is TenderMode.SINGLE
        assert ledger.single_method is TenderMethod.CASH

    @pytest.mark.parametrize(
        "cash, bank, mobile, expected",
        [
            ("100", "200", "50", TenderMethod.BANK),
            ("100", "50", "200", TenderMethod.MOBILE),
            ("100", "100", "100", TenderMethod.CASH),
            ("50", "100", "100", TenderMethod.BANK),
            ("0", "0", "0", TenderMethod.CASH),
        ],
    )
    def test_primary_method(self, cash, bank, mobile, expected):
        ledger = TenderLedger()
        ledger.select_split()
        ledger.set_split_amount(TenderMethod.CASH, cash)
        ledger.set_split_amount(TenderMethod.BANK, bank)
        ledger.set_split_amount(TenderMethod.MOBILE, mobile)

        assert ledger.primary_method() is expected

    def test_single_breakdown_assigns_full_amount(self):
        ledger = TenderLedger()
        ledger.select_single(TenderMethod.MOBILE)

        breakdown = ledger.breakdown(D("300"))

        assert breakdown.amounts[TenderMethod.MOBILE] == D("300")
        assert breakdown.amounts[TenderMethod.CASH] == D("0")
        assert breakdown.primary_method is TenderMethod.MOBILE
        assert not breakdown.is_split

    def test_split_breakdown_is_verbatim(self):
        ledger = TenderLedger()
        ledger.select_split()
        ledger.set_split_amount(TenderMethod.CASH, "200.004")
        ledger.set_split_amount(TenderMethod.BANK, "150")

        breakdown = ledger.breakdown(D("350"))

        assert breakdown.amounts[TenderMethod.CASH] == D("200.004")
        assert breakdown.total_paid == D("350.004")
        assert breakdown.is_split
