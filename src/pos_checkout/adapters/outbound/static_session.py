from __future__ import annotations

from dataclasses import dataclass

from pos_checkout.core.ports.outbound.session import SessionContext


@dataclass(frozen=True)
class StaticSession(SessionContext):
    branch: str
    operator: str | None = None

    def branch_id(self) -> str:
        return self.branch

    def operator_id(self) -> str | None:
        return self.operator
