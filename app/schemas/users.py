from pydantic import BaseModel, Field, EmailStr, field_validator
from typing import Literal, Optional, List

from app.schemas.collections import CollectionPublic

Role = Literal["designer", "customer"]


class UserLogin(BaseModel):
    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, description="User password")

    class Config:
        json_schema_extra = {
            "example": {
                "email": "designer@example.com",
                "password": "myPassword123"
            }
        }


class UserRegister(BaseModel):
    email: EmailStr = Field(..., description="User email address")
    username: str = Field(
        min_length=3,
        max_length=50,
        description="Username (3-50 characters)"
    )
    password: str = Field(
        min_length=8,
        description="Password (minimum 8 characters)",
        examples=["myPassword123", "SecurePass456!"],
    )
    name: Optional[str] = Field(None, max_length=100, description="Display name")
    role: Role = Field("designer", description="Role of the user")

    @field_validator('username')
    @classmethod
    def validate_username(cls, v: str) -> str:
        if not v.strip():
            raise ValueError('username cannot be empty or whitespace only')
        return v.strip()

    class Config:
        json_schema_extra = {
            "example": {
                "email": "designer@example.com",
                "username": "janedoe",
                "password": "myPassword123",
                "name": "Jane Doe"
            }
        }


class GoogleAuthRequest(BaseModel):
    credential: str = Field(..., min_length=1, description="Google ID token from the sign-in button")


class UserPublic(BaseModel):
    """Fields safe to show to unauthenticated visitors"""
    id: int
    username: str
    name: Optional[str] = None
    role: str
    profile_picture: Optional[str] = None
    bio: Optional[str] = None

    class Config:
        from_attributes = True


class UserPrivate(UserPublic):
    email: EmailStr
    wallet_address: Optional[str] = None


class GoogleUser(BaseModel):
    id: int
    email: EmailStr
    name: Optional[str] = None
    role: str
    profile_picture: Optional[str] = None

    class Config:
        from_attributes = True


class AuthResponse(BaseModel):
    token: str
    user: UserPrivate


class GoogleAuthResponse(BaseModel):
    success: bool = True
    token: str
    user: GoogleUser


class UserUpdate(BaseModel):
    """Partial profile update; omitted fields are left untouched"""
    username: Optional[str] = Field(None, min_length=3, max_length=50)
    name: Optional[str] = Field(None, max_length=100)
    profile_picture: Optional[str] = Field(None, max_length=500)
    bio: Optional[str] = Field(None, max_length=1000)
    wallet_address: Optional[str] = Field(None, max_length=64)

    @field_validator('username')
    @classmethod
    def validate_username(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError('username cannot be null')
        if not v.strip():
            raise ValueError('username cannot be empty or whitespace only')
        return v.strip()


class DesignerProfile(BaseModel):
    designer: UserPublic
    collections: List[CollectionPublic]

