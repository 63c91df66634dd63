# Role-Based Access Control
# This module defines user roles and permissions for the marketplace

from enum import Enum
from typing import List, Set


class UserType(str, Enum):
    """User types in the marketplace."""
    BRAND = "brand"
    INFLUENCER = "influencer"
    ADMIN = "admin"


class Permission(str, Enum):
    """Fine-grained permissions for the platform."""

    # Brand permissions
    MANAGE_BRAND_PROFILE = "manage_brand_profile"
    MANAGE_SUBSCRIPTION = "manage_subscription"
    CREATE_CAMPAIGNS = "create_campaigns"
    MANAGE_CAMPAIGNS = "manage_campaigns"
    REVIEW_APPLICATIONS = "review_applications"
    SEARCH_INFLUENCERS = "search_influencers"

    # Influencer permissions
    MANAGE_INFLUENCER_PROFILE = "manage_influencer_profile"
    APPLY_TO_CAMPAIGNS = "apply_to_campaigns"
    SUBMIT_PROOF = "submit_proof"

    # Common permissions
    VIEW_CAMPAIGNS = "view_campaigns"
    USE_CHAT = "use_chat"

    # Admin permissions
    VIEW_ADMIN_STATS = "view_admin_stats"
    MANAGE_USERS = "manage_users"
    VERIFY_INFLUENCERS = "verify_influencers"
    VIEW_ALL_CAMPAIGNS = "view_all_campaigns"
    RUN_STATS_SYNC = "run_stats_sync"


# Role to permissions mapping
ROLE_PERMISSIONS: dict[UserType, Set[Permission]] = {
    UserType.BRAND: {
        Permission.MANAGE_BRAND_PROFILE,
        Permission.MANAGE_SUBSCRIPTION,
        Permission.CREATE_CAMPAIGNS,
        Permission.MANAGE_CAMPAIGNS,
        Permission.REVIEW_APPLICATIONS,
        Permission.SEARCH_INFLUENCERS,
        # Common
        Permission.VIEW_CAMPAIGNS,
        Permission.USE_CHAT,
    },

    UserType.INFLUENCER: {
        Permission.MANAGE_INFLUENCER_PROFILE,
        Permission.APPLY_TO_CAMPAIGNS,
        Permission.SUBMIT_PROOF,
        # Common
        Permission.VIEW_CAMPAIGNS,
        Permission.USE_CHAT,
    },

    UserType.ADMIN: {
        # Admin has ALL permissions
        *Permission.__members__.values()
    },
}


def get_permissions_for_role(user_type: UserType) -> Set[Permission]:
    """Get all permissions for a given user type."""
    return ROLE_PERMISSIONS.get(user_type, set())


def has_permission(user_type: UserType, permission: Permission) -> bool:
    """Check if a user type has a specific permission."""
    return permission in get_permissions_for_role(user_type)


def has_any_permission(user_type: UserType, permissions: List[Permission]) -> bool:
    """Check if a user type has any of the given permissions."""
    user_permissions = get_permissions_for_role(user_type)
    return any(p in user_permissions for p in permissions)
