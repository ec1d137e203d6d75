from fastapi import APIRouter, Depends
from app.core.dependencies import get_current_principal, get_profile_service
from app.modules.profiles.schemas import ProfileUpdate, ProfileResponse
from app.modules.profiles.service import ProfileService
from typing import Dict

router = APIRouter(prefix="/profiles", tags=["profiles"])


@router.get("", response_model=ProfileResponse)
async def get_profile_by_email(
    email: str,
    service: ProfileService = Depends(get_profile_service)
):
    """Look up a profile by email (profiles are public)"""
    return service.get_profile_by_email(email)


@router.get("/{profile_id}", response_model=ProfileResponse)
async def get_profile(
    profile_id: str,
    service: ProfileService = Depends(get_profile_service)
):
    """Get profile by principal ID (profiles are public)"""
    return service.get_profile(profile_id)


@router.put("/{profile_id}", response_model=ProfileResponse)
async def update_profile(
    profile_id: str,
    profile_data: ProfileUpdate,
    principal: Dict = Depends(get_current_principal),
    service: ProfileService = Depends(get_profile_service)
):
    """Update own display name"""
    return service.update_profile(principal["id"], profile_id, profile_data)
