"""
Roles and capabilities.

This defines WHAT each role can do. The decisions live in policy.py; this
module only holds the enumerated role set and the static permission table.
"""

from enum import Enum

from storefront.auth.errors import InvalidRole


class Role(str, Enum):
    """Platform-wide role. Lower rank means more privileged."""

    ADMIN = "admin"
    MODERATOR = "moderator"
    SELLER = "seller"
    CUSTOMER = "customer"


# Role given to every self-registered account.
DEFAULT_ROLE = Role.CUSTOMER

# Wildcard capability: a role holding it has every capability, including future ones.
WILDCARD = "all"

ROLE_RANKS: dict[Role, int] = {
    Role.ADMIN: 1,
    Role.MODERATOR: 2,
    Role.SELLER: 3,
    Role.CUSTOMER: 4,
}

ROLE_DESCRIPTIONS: dict[Role, str] = {
    Role.ADMIN: "Full system administrator with complete access",
    Role.MODERATOR: "Content moderator with management privileges",
    Role.SELLER: "Product seller with inventory and order management",
    Role.CUSTOMER: "Regular customer with shopping capabilities",
}


# Capabilities per role, grouped by area for introspection endpoints.
# Admin's listed groups are informational; the WILDCARD entry is what grants access.
ROLE_CAPABILITY_GROUPS: dict[Role, dict[str, tuple[str, ...]]] = {
    Role.ADMIN: {
        "general": (WILDCARD,),
        "users": ("view_users", "edit_users", "delete_users", "change_user_roles"),
        "products": ("create_products", "edit_products", "delete_products", "manage_categories"),
        "orders": ("view_orders", "edit_orders", "delete_orders", "update_order_status"),
        "reviews": ("view_reviews", "edit_reviews", "delete_reviews", "moderate_reviews"),
        "system": ("manage_settings", "view_statistics", "export_data"),
    },
    Role.MODERATOR: {
        "general": ("view_dashboard",),
        "users": ("view_users", "edit_users"),
        "products": ("create_products", "edit_products", "manage_categories"),
        "orders": ("view_orders", "update_order_status"),
        "reviews": ("view_reviews", "moderate_reviews"),
        "system": ("view_statistics",),
    },
    Role.SELLER: {
        "general": ("view_dashboard",),
        "products": (
            "create_products",
            "edit_own_products",
            "view_own_products",
            "manage_own_products",
        ),
        "orders": ("view_own_orders", "update_own_orders", "update_own_order_status"),
        "reviews": ("view_product_reviews", "reply_to_reviews"),
        "system": ("view_sales_statistics",),
    },
    Role.CUSTOMER: {
        "general": ("view_catalog",),
        "products": ("view_products",),
        "orders": ("create_orders", "view_own_orders", "cancel_own_orders"),
        "reviews": ("write_reviews", "edit_own_reviews", "delete_own_reviews"),
        "system": ("view_order_history",),
    },
}


def valid_role_names() -> list[str]:
    """Role values in rank order (most privileged first)."""
    return [role.value for role in sorted(Role, key=ROLE_RANKS.__getitem__)]


def parse_role(value: object) -> Role:
    """
    Strictly convert a string to a Role.

    Unknown values raise InvalidRole; there is no fallback to the lowest rank.
    """
    if isinstance(value, Role):
        return value
    if isinstance(value, str):
        try:
            return Role(value)
        except ValueError:
            pass
    raise InvalidRole(value, valid_role_names())
