from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List, Dict, Any
from app.modules.profiles.schemas import ProfileResponse


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: str
    email: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)


class RegisterResponse(BaseModel):
    user_id: str
    email: str
    profile: ProfileResponse
    message: str


class MeResponse(BaseModel):
    id: str
    email: Optional[str] = None
    profile: Optional[ProfileResponse] = None
    policies: List[Dict[str, Any]]


class DeleteAccountResponse(BaseModel):
    user_id: str
    messages_deleted: int
    profile_deleted: bool
