"""Service layer for the login flow."""

from attendance_hub.services.oauth_service import GoogleOAuthService, OAuthFlowError
from attendance_hub.services.role_service import RoleService, RoleStore, SupabaseRoleStore

__all__ = [
    "GoogleOAuthService",
    "OAuthFlowError",
    "RoleService",
    "RoleStore",
    "SupabaseRoleStore",
]
