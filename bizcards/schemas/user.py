from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from bizcards.models.user import UserRole


class UserBase(BaseModel):
    email: EmailStr
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class UserCreate(UserBase):
    password: str = Field(..., min_length=8)


class UserResponse(UserBase):
    id: str
    role: UserRole
    company_id: Optional[str] = None
    title: Optional[str] = None

    class Config:
        from_attributes = True


class SignInRequest(BaseModel):
    email: str
    password: str
    locale: Optional[str] = None


class SignInResponse(BaseModel):
    user: UserResponse
    redirect_to: str


class PasswordConfirmation(BaseModel):
    """Re-entered password guarding a destructive action."""
    password: str = Field(..., min_length=1)
