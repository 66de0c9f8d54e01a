from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Dict, Mapping

from returns.result import Result, Success

from pos_checkout.core.domain.model.errors import CheckoutError
from pos_checkout.core.domain.model.money import EPSILON, ZERO, parse_amount


class TenderMethod(str, Enum):
    # declaration order is the tie-break order for the primary method
    CASH = "cash"
    BANK = "bank"
    MOBILE = "mobile"


class TenderMode(str, Enum):
    SINGLE = "single"
    SPLIT = "split"


def _zero_splits() -> Dict[TenderMethod, Decimal]:
    return {m: ZERO for m in TenderMethod}


@dataclass(frozen=True)
class TenderBreakdown:
    amounts: Mapping[TenderMethod, Decimal]
    primary_method: TenderMethod
    total_paid: Decimal
    is_split: bool


@dataclass
class TenderLedger:
    mode: TenderMode = TenderMode.SINGLE
    single_method: TenderMethod = TenderMethod.CASH
    split_amounts: Dict[TenderMethod, Decimal] = field(default_factory=_zero_splits)

    # ---- mode --------------------------------------------------------------

    def select_single(self, method: TenderMethod) -> None:
        # split entries stay dormant so toggling back restores them
        self.mode = TenderMode.SINGLE
        self.single_method = method

    def select_split(self) -> None:
        self.mode = TenderMode.SPLIT

    # ---- split entries -----------------------------------------------------

    def set_split_amount(
        self, method: TenderMethod, raw: Decimal | int | float | str
    ) -> Result[Decimal, CheckoutError]:
        if isinstance(raw, str) and raw.strip() == "":
            raw = ZERO
        parsed = parse_amount(raw, field=f"split[{method.value}]")
        if isinstance(parsed, Success):
            self.split_amounts[method] = parsed.unwrap()
        return parsed

    def pay_remainder(self, method: TenderMethod, total_due: Decimal) -> Decimal:
        others = sum(
            (amt for m, amt in self.split_amounts.items() if m is not method), ZERO
        )
        self.split_amounts[method] = max(ZERO, total_due - others)
        return self.split_amounts[method]

    def clear(self) -> None:
        self.split_amounts = _zero_splits()

    def reset(self) -> None:
        self.mode = TenderMode.SINGLE
        self.single_method = TenderMethod.CASH
        self.clear()

    # ---- derived -----------------------------------------------------------

    def split_total(self) -> Decimal:
        return sum(self.split_amounts.values(), ZERO)

    def total_tendered(self, total_due: Decimal) -> Decimal:
        if self.mode is TenderMode.SINGLE:
            return total_due
        return self.split_total()

    def remaining(self, total_due: Decimal) -> Decimal:
        return total_due - self.total_tendered(total_due)

    def is_complete(self, total_due: Decimal) -> bool:
        if self.mode is TenderMode.SINGLE:
            return True
        return abs(self.remaining(total_due)) < EPSILON

    def is_overpaid(self, total_due: Decimal) -> bool:
        if self.mode is TenderMode.SINGLE:
            return False
        return self.total_tendered(total_due) - total_due > EPSILON

    def primary_method(self) -> TenderMethod:
        if self.mode is TenderMode.SINGLE:
            return self.single_method
        best = TenderMethod.CASH
        for method in TenderMethod:
            if self.split_amounts[method] > self.split_amounts[best]:
                best = method
        return best

    def breakdown(self, final_total: Decimal) -> TenderBreakdown:
        if self.mode is TenderMode.SINGLE:
            amounts = _zero_splits()
            amounts[self.single_method] = final_total
            return TenderBreakdown(
                amounts=MappingProxyType(amounts),
                primary_method=self.single_method,
                total_paid=final_total,
                is_split=False,
            )
        return TenderBreakdown(
            amounts=MappingProxyType(dict(self.split_amounts)),
            primary_method=self.primary_method(),
            total_paid=self.split_total(),
            is_split=True,
        )
