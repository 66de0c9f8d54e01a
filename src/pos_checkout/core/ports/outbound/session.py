from __future__ import annotations

from typing import Protocol


class SessionContext(Protocol):
    def branch_id(self) -> str: ...

    def operator_id(self) -> str | None: ...
