from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum

class RoleName(str, Enum):
    """Role enumeration"""
    CUSTOMER = "customer"
    ORGANIZER = "organizer"
    ADMIN = "admin"

class Capability(str, Enum):
    """Capabilities granted through roles"""
    BOOK_EVENTS = "book_events"
    MANAGE_EVENTS = "manage_events"
    MANAGE_BOOKINGS = "manage_bookings"
    MANAGE_PROMOTIONS = "manage_promotions"

class UserBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    email: EmailStr

class UserCreate(UserBase):
    password: str = Field(..., min_length=6, max_length=72)
    phone: Optional[str] = None
    register_as_organizer: bool = False

class User(UserBase):
    id: int
    phone: Optional[str] = None
    roles: List[str] = []
    created_at: Optional[datetime] = None
    
    class Config:
        from_attributes = True

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class AuthResponse(BaseModel):
    access_token: str
    token_type: str
    user: User

class CurrentUser(BaseModel):
    """Authenticated actor resolved once per request"""
    id: int
    name: str
    email: str
    roles: List[str] = []
