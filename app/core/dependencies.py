"""
Core dependencies for route protection and service wiring
"""

from fastapi import Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from app.core.access_gate import AccessGate, get_access_gate
from app.database.supabase_client import get_supabase, get_supabase_admin
from app.modules.auth.service import AuthService
from app.modules.messages.service import MessageService
from app.modules.profiles.projection import IdentityProjection
from app.modules.profiles.service import ProfileService
from supabase import Client

security = HTTPBearer()


def get_identity_projection(
    admin_client: Client = Depends(get_supabase_admin),
    gate: AccessGate = Depends(get_access_gate)
) -> IdentityProjection:
    return IdentityProjection(admin_client, gate)


def get_auth_service(
    supabase: Client = Depends(get_supabase),
    admin_client: Client = Depends(get_supabase_admin),
    projection: IdentityProjection = Depends(get_identity_projection)
) -> AuthService:
    return AuthService(supabase, admin_client, projection)


def get_current_principal(
    credentials: HTTPAuthorizationCredentials = Security(security),
    auth_service: AuthService = Depends(get_auth_service)
) -> dict:
    """Resolve the requester from the JWT bearer token"""
    token = credentials.credentials
    return auth_service.get_current_user(token)


# Data access uses the service-role client; AccessGate enforces row ownership
def get_profile_service(
    admin_client: Client = Depends(get_supabase_admin),
    gate: AccessGate = Depends(get_access_gate)
) -> ProfileService:
    return ProfileService(admin_client, gate)


def get_message_service(
    admin_client: Client = Depends(get_supabase_admin),
    gate: AccessGate = Depends(get_access_gate)
) -> MessageService:
    return MessageService(admin_client, gate)
