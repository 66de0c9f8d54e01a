from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Iterable, Iterator, Mapping

from returns.maybe import Maybe


@dataclass(frozen=True)
class CatalogItem:
    id: str
    name: str
    unit_price: Decimal
    available_stock: int
    category: str = ""

    @property
    def in_stock(self) -> bool:
        return self.available_stock > 0


@dataclass(frozen=True)
class CatalogSnapshot:
    """Point-in-time view of the products offered on the sell screen."""

    items: tuple[CatalogItem, ...] = ()
    taken_at: datetime = field(default_factory=lambda: now_utc())
    _by_id: Mapping[str, CatalogItem] = field(
        init=False, repr=False, compare=False, default_factory=dict
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "_by_id", {it.id: it for it in self.items})

    @staticmethod
    def of(items: Iterable[CatalogItem]) -> "CatalogSnapshot":
        return CatalogSnapshot(items=tuple(items))

    def find(self, product_id: str) -> Maybe[CatalogItem]:
        return Maybe.from_optional(self._by_id.get(product_id))

    def __iter__(self) -> Iterator[CatalogItem]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


def now_utc() -> datetime:
    return datetime.now(timezone.utc)
