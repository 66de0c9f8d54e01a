from __future__ import annotations

import uvicorn

from pos_checkout.config import Settings


def main() -> None:
    settings = Settings.from_env()
    uvicorn.run(
        "pos_checkout.asgi:app",
        host=settings.host,
        port=settings.port,
        reload=False,
    )


if __name__ == "__main__":
    main()
