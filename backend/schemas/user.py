from pydantic import BaseModel, EmailStr
from typing import Optional

# Shared properties for user models
class UserBase(BaseModel):
    email: EmailStr

# Schema for user authentication credentials
class UserLogin(UserBase):
    password: str

# Output schema for user profile details
class UserResponse(UserBase):
    id: int
    role: str

    class Config:
        from_attributes = True

# Schema for JWT authentication token response
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

# Current admin session as seen by the panel
class SessionState(BaseModel):
    is_authenticated: bool
    is_loading: bool = False
    user: Optional[UserResponse] = None
