from pydantic import BaseModel, Field, field_validator
from typing import Optional


class SizeBase(BaseModel):
    label: str = Field(..., min_length=1, max_length=20, examples=["S", "M", "XL"])
    quantity: int = Field(0, ge=0, description="Units in stock")

    @field_validator('label')
    @classmethod
    def validate_label(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('label cannot be empty or whitespace only')
        return v.strip()


class SizeCreate(SizeBase):
    product_id: int


class SizeUpdate(BaseModel):
    label: Optional[str] = Field(None, min_length=1, max_length=20)
    quantity: Optional[int] = Field(None, ge=0)

    @field_validator('label', 'quantity')
    @classmethod
    def reject_null(cls, v, info):
        if v is None:
            raise ValueError(f'{info.field_name} cannot be null')
        if isinstance(v, str):
            if not v.strip():
                raise ValueError(f'{info.field_name} cannot be empty or whitespace only')
            return v.strip()
        return v


class SizeResponse(SizeBase):
    id: int
    product_id: int

    class Config:
        from_attributes = True
