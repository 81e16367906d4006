from __future__ import annotations

from pydantic import BaseModel, ConfigDict, ValidationInfo, field_validator


class Product(BaseModel):
    """Single catalog entry as produced by a CatalogSource."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    description: str
    category: str
    price: int  # Minor currency unit
    stock: int

    @field_validator("price", "stock")
    @classmethod
    def validate_non_negative(cls, v: int, info: ValidationInfo) -> int:
        if v < 0:
            raise ValueError(f"{info.field_name} must be >= 0")
        return v


# Source order is preserved; id uniqueness is not checked here.
Catalog = tuple[Product, ...]
