from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

# Shared properties for user models
class UserBase(BaseModel):
    username: str = Field(min_length=1)

# Schema for user authentication credentials
class UserLogin(UserBase):
    password: str

# Schema for user creation by a super user
class UserCreate(UserBase):
    password: str = Field(min_length=6)
    name: str
    is_super_user: bool = False
    unit_id: Optional[int] = None

# Schema for administrative user updates
class UserUpdate(BaseModel):
    name: Optional[str] = None
    password: Optional[str] = Field(None, min_length=6)
    is_super_user: Optional[bool] = None
    unit_id: Optional[int] = None
    is_active: Optional[bool] = None

# Output schema for user profile details
class UserResponse(UserBase):
    id: int
    name: str
    is_super_user: bool
    unit_id: Optional[int] = None
    is_active: bool

    model_config = ConfigDict(from_attributes=True)

# Schema for JWT authentication token response
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"

# Schema for a user changing their own password
class PasswordChange(BaseModel):
    old_password: str
    new_password: str = Field(min_length=6)

# Schema for a super user resetting someone else's password
class PasswordReset(BaseModel):
    new_password: str = Field(min_length=6)
