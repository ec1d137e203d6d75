"""
Identity Projection: keeps exactly one profile per principal.

on_principal_created runs inside the signup request, straight after Supabase
Auth creates the principal. If the profile cannot be written the principal is
deleted again, so a principal never survives without its profile. The failure
is not retried; only a fresh signup creates the pair.

on_principal_deleted is the explicit cascade for account deletion: it removes
the principal's messages and profile.
"""

import logging
from typing import Dict, Any

from supabase import Client

from app.core.access_gate import AccessGate
from app.core.errors import translate_store_error
from app.modules.profiles.schemas import ProfileResponse
from app.modules.profiles.service import ProfileService

logger = logging.getLogger(__name__)


class IdentityProjection:
    def __init__(self, admin_client: Client, gate: AccessGate):
        # Service-role client: the new principal cannot pass RLS on profiles yet
        self.admin_client = admin_client
        self.profiles = ProfileService(admin_client, gate)

    def on_principal_created(self, principal_id: str, email: str) -> ProfileResponse:
        try:
            profile = self.profiles.create_profile(principal_id, email)
        except Exception as e:
            logger.error(f"Profile projection failed for principal {principal_id}: {e}")
            self._rollback_principal(principal_id)
            raise translate_store_error(e)

        logger.info(f"Projected profile for principal {principal_id}")
        return profile

    def _rollback_principal(self, principal_id: str) -> None:
        try:
            self.admin_client.auth.admin.delete_user(principal_id)
            logger.info(f"Rolled back principal {principal_id} after failed projection")
        except Exception as e:
            # Leaves a principal without a profile; backfill_profiles repairs it
            logger.error(f"Could not roll back principal {principal_id}: {e}")

    def count_owned(self, principal_id: str) -> Dict[str, Any]:
        """What on_principal_deleted would remove, taken before the principal goes away.

        The schema's ON DELETE CASCADE empties both tables as soon as the
        principal is deleted, so the summary has to be counted up front.
        """
        try:
            messages_result = self.admin_client.table("messages")\
                .select("id", count="exact")\
                .eq("user_id", principal_id)\
                .limit(1)\
                .execute()
            profile = self.profiles.find_profile(principal_id)
        except Exception as e:
            raise translate_store_error(e)

        return {
            "messages_deleted": messages_result.count or 0,
            "profile_deleted": profile is not None,
        }

    def on_principal_deleted(self, principal_id: str) -> Dict[str, Any]:
        """Delete every message and the profile owned by principal_id. Safe to repeat."""
        try:
            messages_result = self.admin_client.table("messages")\
                .delete()\
                .eq("user_id", principal_id)\
                .execute()
            profile_result = self.admin_client.table("profiles")\
                .delete()\
                .eq("id", principal_id)\
                .execute()
        except Exception as e:
            raise translate_store_error(e)

        summary = {
            "messages_deleted": len(messages_result.data or []),
            "profile_deleted": bool(profile_result.data),
        }
        logger.info(f"Cascaded deletion of principal {principal_id}: {summary}")
        return summary
