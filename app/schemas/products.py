from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from datetime import datetime

from app.schemas.sizes import SizeBase, SizeResponse


def clean_text(v: str, field_name: str) -> str:
    if not v or not v.strip():
        raise ValueError(f'{field_name} cannot be empty or whitespace only')
    return v.strip()


def round_price(v: float) -> float:
    # Round to 2 decimal places
    return round(v, 2)


class ProductBase(BaseModel):
    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Product name (1-100 characters)",
        examples=["Oversized Hoodie", "Denim Jacket"]
    )
    description: Optional[str] = Field(
        None,
        max_length=1000,
        description="Product description (optional, max 1000 characters)"
    )
    price: float = Field(
        0,
        ge=0,
        description="Product price (0 or greater)",
        examples=[49.99, 120.00]
    )
    image: Optional[str] = Field(None, max_length=500, description="Product image URL")

    @field_validator('name')
    @classmethod
    def validate_not_empty(cls, v: str, info) -> str:
        return clean_text(v, info.field_name)

    @field_validator('price')
    @classmethod
    def validate_price(cls, v: float) -> float:
        return round_price(v)


class ProductCreate(ProductBase):
    collection_id: int = Field(..., description="Collection the product belongs to")
    sizes: List[SizeBase] = Field(default_factory=list, description="Size variants created with the product")

    class Config:
        json_schema_extra = {
            "example": {
                "collection_id": 1,
                "name": "Oversized Hoodie",
                "description": "Heavyweight cotton hoodie",
                "price": 89.0,
                "sizes": [{"label": "M", "quantity": 10}, {"label": "L", "quantity": 5}]
            }
        }


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    price: Optional[float] = Field(None, ge=0)
    image: Optional[str] = Field(None, max_length=500)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: Optional[str], info) -> str:
        if v is None:
            raise ValueError('name cannot be null')
        return clean_text(v, info.field_name)

    @field_validator('price')
    @classmethod
    def validate_price(cls, v: Optional[float]) -> float:
        if v is None:
            raise ValueError('price cannot be null')
        return round_price(v)


class ProductPublic(ProductBase):
    id: int
    collection_id: int

    class Config:
        from_attributes = True


class ProductResponse(ProductPublic):
    is_listed: bool
    listing_price: Optional[float] = None
    sizes: List[SizeResponse] = []
    created_at: datetime
    updated_at: datetime


class ListProductRequest(BaseModel):
    product_id: int
    price: float = Field(..., gt=0, description="Listing price in SOL")
