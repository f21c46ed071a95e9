from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class NFTCreate(BaseModel):
    mint: str = Field(..., min_length=32, max_length=64, description="Mint address")
    name: str = Field(..., min_length=1, max_length=100)
    symbol: Optional[str] = Field(None, max_length=20)
    uri: Optional[str] = Field(None, max_length=500, description="Off-chain metadata JSON URL")
    image: Optional[str] = Field(None, max_length=500)
    group: Optional[str] = Field(None, max_length=64, description="Collection (group) address")
    owner: Optional[str] = Field(None, max_length=64)
    collection_id: Optional[int] = None


class NFTResponse(NFTCreate):
    id: int
    created_at: datetime

    class Config:
        from_attributes = True
