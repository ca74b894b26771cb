"""
Capability table: which roles may call which group of routes
Flat role set, no inheritance between roles
"""
from .constants import UserRole
from .utils.auth import authorize_roles

ALL_ROLES = frozenset(UserRole)
ADMIN_ONLY = frozenset({UserRole.ADMIN})

CAPABILITIES = {
    "categories:read": ALL_ROLES,
    "categories:write": ADMIN_ONLY,
    "units:read": ALL_ROLES,
    "units:write": ADMIN_ONLY,
    "units:reorder": ADMIN_ONLY,
    "uploads:read": ALL_ROLES,
    "uploads:write": ALL_ROLES,
    "uploads:delete": ADMIN_ONLY,
    "users:manage": ADMIN_ONLY,
}


def roles_for(capability):
    try:
        return CAPABILITIES[capability]
    except KeyError:
        raise KeyError(f"Unknown capability: {capability}") from None


def require(capability):
    """Route guard for a capability (must follow verify_jwt)"""
    roles = sorted(roles_for(capability), key=lambda role: role.value)
    return authorize_roles(*roles)
