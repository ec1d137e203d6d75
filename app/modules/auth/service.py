import hashlib
import logging
import time
from supabase import Client
from app.core.errors import ConstraintViolationError, StoreUnavailableError, translate_store_error
from app.modules.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, RegisterResponse, DeleteAccountResponse
from app.modules.profiles.projection import IdentityProjection
from fastapi import HTTPException
from typing import Dict, Any, Optional
import httpx

logger = logging.getLogger(__name__)

# In-memory cache for get_current_user to reduce Supabase auth calls (e.g. many parallel requests with same token)
_AUTH_USER_CACHE: Dict[str, tuple] = {}
_AUTH_CACHE_TTL_SEC = 60
_AUTH_CACHE_MAX_SIZE = 500


def clear_auth_cache(user_id: Optional[str] = None) -> None:
    """Drop cached token lookups, for one principal or all of them"""
    if user_id is None:
        _AUTH_USER_CACHE.clear()
        return
    for key in [k for k, (data, _) in _AUTH_USER_CACHE.items() if data.get("id") == user_id]:
        _AUTH_USER_CACHE.pop(key, None)


class AuthService:
    def __init__(
        self,
        supabase: Client,
        admin_client: Optional[Client] = None,
        projection: Optional[IdentityProjection] = None
    ):
        self.supabase = supabase
        self.admin_client = admin_client
        self.projection = projection

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Register a principal with Supabase Auth and project its profile"""
        try:
            auth_response = self.supabase.auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
            })
        except httpx.TransportError:
            raise StoreUnavailableError("Authentication service unavailable")
        except Exception as e:
            error_message = str(e)
            if "already registered" in error_message.lower() or "already exists" in error_message.lower():
                raise ConstraintViolationError("email", "already exists")
            raise HTTPException(status_code=500, detail=f"Registration failed: {error_message}")

        if not auth_response.user:
            raise HTTPException(status_code=400, detail="Failed to register user")

        user = auth_response.user
        email = user.email or register_data.email
        # Fails the whole registration (and removes the principal) if the profile cannot be written
        profile = self.projection.on_principal_created(str(user.id), email)

        return RegisterResponse(
            user_id=str(user.id),
            email=email,
            profile=profile,
            message="User registered successfully"
        )

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Authenticate principal using Supabase Auth"""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password
            })

            if not auth_response.user or not auth_response.session:
                raise HTTPException(status_code=401, detail="Invalid credentials")

            return TokenResponse(
                access_token=auth_response.session.access_token,
                token_type="bearer",
                user_id=str(auth_response.user.id),
                email=auth_response.user.email or login_data.email
            )
        except HTTPException:
            raise
        except httpx.TransportError:
            raise StoreUnavailableError("Authentication service unavailable")
        except Exception as e:
            error_message = str(e)
            if "invalid" in error_message.lower() or "credentials" in error_message.lower():
                raise HTTPException(status_code=401, detail="Invalid email or password")
            raise HTTPException(status_code=500, detail=f"Login failed: {error_message}")

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Get current principal from Supabase Auth token. Uses short TTL cache to reduce auth API calls."""
        try:
            cache_key = hashlib.sha256(token.encode()).hexdigest()
            now = time.monotonic()
            if cache_key in _AUTH_USER_CACHE:
                user_data, expiry = _AUTH_USER_CACHE[cache_key]
                if now < expiry:
                    return user_data
                del _AUTH_USER_CACHE[cache_key]
            user_response = self.supabase.auth.get_user(jwt=token)
            if not user_response or not user_response.user:
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            user = user_response.user
            user_data = {
                "id": str(user.id),
                "email": user.email,
                "user_metadata": user.user_metadata or {},
                "app_metadata": user.app_metadata or {},
                "created_at": user.created_at,
                "updated_at": user.updated_at
            }
            if len(_AUTH_USER_CACHE) < _AUTH_CACHE_MAX_SIZE:
                _AUTH_USER_CACHE[cache_key] = (user_data, now + _AUTH_CACHE_TTL_SEC)
            return user_data
        except HTTPException:
            raise
        except httpx.TransportError:
            raise StoreUnavailableError("Authentication service unavailable")
        except Exception as e:
            error_msg = str(e)
            if "JWT" in error_msg or "expired" in error_msg.lower() or "invalid" in error_msg.lower():
                raise HTTPException(status_code=401, detail="Invalid or expired token")
            raise HTTPException(status_code=401, detail="Authentication failed")

    def logout(self, token: str) -> bool:
        """Revoke the caller's own session (requires service role key)"""
        _AUTH_USER_CACHE.pop(hashlib.sha256(token.encode()).hexdigest(), None)
        try:
            # The shared anon client holds no per-request session; revoke by the caller's JWT
            self.admin_client.auth.admin.sign_out(token)
            return True
        except Exception as e:
            logger.warning(f"Sign out failed: {e}")
            return False

    def delete_account(self, principal_id: str) -> DeleteAccountResponse:
        """Delete the principal, then cascade to its profile and messages (requires service role key)"""
        summary = self.projection.count_owned(principal_id)
        try:
            self.admin_client.auth.admin.delete_user(principal_id)
        except Exception as e:
            error = translate_store_error(e)
            if isinstance(error, HTTPException):
                raise error
            raise HTTPException(status_code=500, detail=f"Failed to delete principal: {str(e)}")

        clear_auth_cache(principal_id)
        # Removes anything the database cascade left behind
        self.projection.on_principal_deleted(principal_id)
        return DeleteAccountResponse(user_id=principal_id, **summary)
