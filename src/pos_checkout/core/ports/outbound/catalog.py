from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from returns.result import Result

from pos_checkout.core.domain.model.catalog import CatalogItem
from pos_checkout.core.domain.model.errors import CheckoutError

ALL_CATEGORIES = "all"


@dataclass(frozen=True)
class CatalogQuery:
    branch_id: str
    category: str = ALL_CATEGORIES
    search: str = ""
    page: int = 0
    page_size: int = 20


@dataclass(frozen=True)
class CatalogPage:
    items: Sequence[CatalogItem]
    page: int
    total_count: int
    has_more: bool


class CatalogProvider(Protocol):
    """In-stock products of one branch, sorted by name."""

    def list_products(self, query: CatalogQuery) -> Result[CatalogPage, CheckoutError]: ...

    def list_categories(self, branch_id: str) -> Result[Sequence[str], CheckoutError]: ...
