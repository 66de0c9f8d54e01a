from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, List, Sequence

from returns.result import Failure, Result, Success

from pos_checkout.core.domain.model.catalog import CatalogItem
from pos_checkout.core.domain.model.errors import CheckoutError, InvalidInput
from pos_checkout.core.ports.outbound.catalog import (
    ALL_CATEGORIES,
    CatalogPage,
    CatalogProvider,
    CatalogQuery,
)


@dataclass
class InMemoryCatalog(CatalogProvider):
    items_by_branch: Dict[str, List[CatalogItem]] = field(default_factory=dict)

    def list_products(self, query: CatalogQuery) -> Result[CatalogPage, CheckoutError]:
        if query.page < 0:
            return Failure(InvalidInput(message="must be >= 0", field="page"))
        if query.page_size <= 0:
            return Failure(InvalidInput(message="must be > 0", field="page_size"))

        items = [it for it in self.items_by_branch.get(query.branch_id, []) if it.in_stock]

        if query.category != ALL_CATEGORIES:
            items = [it for it in items if it.category == query.category]

        needle = query.search.strip().lower()
        if needle:
            items = [it for it in items if needle in it.name.lower()]

        items.sort(key=lambda it: it.name)

        start = query.page * query.page_size
        sliced = items[start : start + query.page_size]
        return Success(
            CatalogPage(
                items=tuple(sliced),
                page=query.page,
                total_count=len(items),
                has_more=start + len(sliced) < len(items),
            )
        )

    def list_categories(self, branch_id: str) -> Result[Sequence[str], CheckoutError]:
        seen = {it.category for it in self.items_by_branch.get(branch_id, []) if it.category}
        return Success(tuple(sorted(seen)))

    def restock(self, branch_id: str, product_id: str, available_stock: int) -> None:
        items = self.items_by_branch.get(branch_id, [])
        for i, it in enumerate(items):
            if it.id == product_id:
                items[i] = replace(it, available_stock=available_stock)
