from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from freshcatalog.models.catalog import Catalog


class ProductsEnvelope(BaseModel):
    """Body of ``GET /api/products``.

    ``data`` may only be absent when ``success`` is false.
    """

    model_config = ConfigDict(extra="forbid")

    success: bool
    data: Catalog | None = None
    timestamp: datetime | None = None  # ISO-8601, set by the serving endpoint
