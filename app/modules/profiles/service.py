from supabase import Client
from app.config.policies_config import Operation, Resource
from app.core.access_gate import AccessGate
from app.core.errors import NotFoundError, translate_store_error
from app.modules.profiles.schemas import ProfileUpdate, ProfileResponse
from typing import Optional
from fastapi import HTTPException
import logging

logger = logging.getLogger(__name__)


class ProfileService:
    def __init__(self, supabase: Client, gate: AccessGate):
        self.supabase = supabase
        self.gate = gate

    def create_profile(self, identifier: str, email: str) -> ProfileResponse:
        """Insert the profile for a new principal. Only IdentityProjection calls this."""
        # The projection acts on behalf of the principal it is projecting
        self.gate.authorize_write(Resource.PROFILES, Operation.CREATE, identifier, identifier)
        try:
            result = self.supabase.table("profiles").insert({
                "id": identifier,
                "email": email,
            }).execute()
        except Exception as e:
            raise translate_store_error(e)

        if not result.data:
            raise HTTPException(status_code=500, detail="Failed to create profile")
        return ProfileResponse.from_row(result.data[0])

    def get_profile(self, identifier: str) -> ProfileResponse:
        """Get profile by principal ID. Profiles are public."""
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .eq("id", identifier)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise translate_store_error(e, "Profile not found")

        if not result.data:
            raise NotFoundError("Profile not found")
        return ProfileResponse.from_row(result.data[0])

    def find_profile(self, identifier: str) -> Optional[ProfileResponse]:
        try:
            return self.get_profile(identifier)
        except NotFoundError:
            return None

    def get_profile_by_email(self, email: str) -> ProfileResponse:
        """Directory lookup by email"""
        try:
            result = self.supabase.table("profiles")\
                .select("*")\
                .eq("email", email)\
                .limit(1)\
                .execute()
        except Exception as e:
            raise translate_store_error(e, "Profile not found")

        if not result.data:
            raise NotFoundError("Profile not found")
        return ProfileResponse.from_row(result.data[0])

    def update_profile(self, requester_id: str, identifier: str, profile_data: ProfileUpdate) -> ProfileResponse:
        """Update display name. Non-owners get 403 whether or not the profile exists."""
        self.gate.authorize_write(Resource.PROFILES, Operation.UPDATE, requester_id, identifier)

        update_data = {}
        if "display_name" in profile_data.model_fields_set:
            update_data["user_name"] = profile_data.display_name
        if not update_data:
            return self.get_profile(identifier)

        try:
            result = self.supabase.table("profiles")\
                .update(update_data)\
                .eq("id", identifier)\
                .execute()
        except Exception as e:
            raise translate_store_error(e, "Profile not found")

        if not result.data:
            raise NotFoundError("Profile not found")
        logger.info(f"Updated profile {identifier}")
        return ProfileResponse.from_row(result.data[0])
