"""Authentication schemas"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, EmailStr, Field

from app.models.user import UserRole


class Token(BaseModel):
    """JWT token response"""
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class TokenPayload(BaseModel):
    """JWT token payload"""
    sub: str  # User ID
    role: str
    exp: datetime


class RefreshRequest(BaseModel):
    """Token refresh request"""
    refresh_token: str


class RegisterRequest(BaseModel):
    """Customer sign-up"""
    email: EmailStr
    password: str = Field(min_length=8, max_length=72)
    full_name: str = Field(min_length=1, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=20)


class ProfileUpdate(BaseModel):
    """Update own profile"""
    full_name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    phone: Optional[str] = Field(default=None, max_length=20)


class UserCreate(BaseModel):
    """Create staff user request (super admin)"""
    email: EmailStr
    password: str = Field(min_length=8, max_length=72)
    full_name: str
    phone: Optional[str] = None
    role: UserRole = UserRole.ADMIN


class UserRoleUpdate(BaseModel):
    role: UserRole


class UserSuspensionUpdate(BaseModel):
    is_suspended: bool


class UserResponse(BaseModel):
    """User response"""
    id: UUID
    email: str
    full_name: Optional[str]
    phone: Optional[str]
    role: UserRole
    is_active: bool
    is_suspended: bool
    created_at: datetime
    last_login: Optional[datetime]

    class Config:
        from_attributes = True
