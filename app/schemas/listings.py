from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class ListingCreate(BaseModel):
    product_id: int
    price: int = Field(..., ge=0, description="Price in lamports")
    mint: Optional[str] = Field(None, max_length=64)
    seller: Optional[str] = Field(None, max_length=64)
    listing_address: Optional[str] = Field(None, max_length=64)


class ListingResponse(ListingCreate):
    id: int
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True
