from fastapi import APIRouter, Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.modules.auth.schemas import (
    LoginRequest, RegisterRequest, TokenResponse, RegisterResponse,
    MeResponse, DeleteAccountResponse
)
from app.modules.auth.service import AuthService
from app.modules.profiles.service import ProfileService
from app.core.dependencies import get_auth_service, get_current_principal, get_profile_service
from app.config.policies_config import get_policy_matrix
from typing import Dict

router = APIRouter(prefix="/auth", tags=["auth"])

# Security scheme for JWT Bearer token
security = HTTPBearer()


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new principal; its profile is created in the same request"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/logout", status_code=200)
async def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.get("/me", response_model=MeResponse)
async def get_current_user(
    current_user: Dict = Depends(get_current_principal),
    profiles: ProfileService = Depends(get_profile_service),
):
    """Current principal, its profile, and the row access rules (for frontend UI)."""
    return MeResponse(
        id=current_user["id"],
        email=current_user.get("email"),
        profile=profiles.find_profile(current_user["id"]),
        policies=get_policy_matrix()["policies"],
    )


@router.delete("/me", response_model=DeleteAccountResponse)
async def delete_account(
    current_user: Dict = Depends(get_current_principal),
    service: AuthService = Depends(get_auth_service)
):
    """Delete own account together with profile and chat history"""
    return service.delete_account(current_user["id"])
