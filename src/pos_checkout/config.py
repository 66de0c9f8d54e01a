from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class Settings:
    branch_id: str = "main"
    operator_id: str | None = None
    currency: str = "ETB"
    page_size: int = 20
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    @staticmethod
    def from_env() -> "Settings":
        try:
            page_size = int(os.getenv("POS_PAGE_SIZE", "20"))
        except ValueError:
            page_size = 20
        try:
            port = int(os.getenv("POS_PORT", "8000"))
        except ValueError:
            port = 8000
        return Settings(
            branch_id=os.getenv("POS_BRANCH_ID", "main"),
            operator_id=os.getenv("POS_OPERATOR_ID") or None,
            currency=os.getenv("POS_CURRENCY", "ETB"),
            page_size=page_size,
            log_level=os.getenv("POS_LOG_LEVEL", "INFO").upper(),
            host=os.getenv("POS_HOST", "0.0.0.0"),
            port=port,
        )
