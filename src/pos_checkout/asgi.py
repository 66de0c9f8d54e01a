from __future__ import annotations

from pos_checkout.adapters.inbound.web.fastapi_app import create_app
from pos_checkout.bootstrap import build_components

components = build_components()
app = create_app(components.checkout, components.settings)
