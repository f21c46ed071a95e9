from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime


def clean_name(v: str) -> str:
    if not v.strip():
        raise ValueError('name cannot be empty or whitespace only')
    return v.strip()


class CollectionBase(BaseModel):
    """Base schema for collection data"""
    name: str = Field(..., min_length=1, max_length=100, description="Collection name")
    description: Optional[str] = Field(None, max_length=1000, description="Collection description")
    image: Optional[str] = Field(None, max_length=500, description="Cover image URL")
    collection_address: Optional[str] = Field(None, max_length=64, description="On-chain collection address")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return clean_name(v)


class CollectionCreate(CollectionBase):
    """Schema for creating a new collection"""
    pass


class CollectionUpdate(BaseModel):
    """Schema for updating an existing collection"""
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=1000)
    image: Optional[str] = Field(None, max_length=500)
    collection_address: Optional[str] = Field(None, max_length=64)

    # Only runs for fields present in the body, so omitted stays untouched
    @field_validator('name')
    @classmethod
    def validate_name(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError('name cannot be null')
        return clean_name(v)


class CollectionPublic(CollectionBase):
    id: int
    designer_id: int

    class Config:
        from_attributes = True


class CollectionResponse(CollectionPublic):
    """Schema for collection response"""
    created_at: datetime
    updated_at: datetime
