"""Role-based access policy.

Pure functions over a user's role list. Roles are validated into ``UserRole``
when the session token is decoded, so nothing here ever sees a free-form
string.
"""

from collections.abc import Iterable
from enum import StrEnum

from imprint.models.user import UserRole


class Capability(StrEnum):
    INVITE_USERS = "invite_users"
    MANAGE_SETTINGS = "manage_settings"
    EDIT_TITLES = "edit_titles"
    SEE_COSTS = "see_costs"
    EDIT_CUSTOMERS = "edit_customers"
    FULFILL_ORDERS = "fulfill_orders"
    MANAGE_INVENTORY = "manage_inventory"
    ACCESS_FINANCIALS = "access_financials"
    MANAGE_PRODUCTION = "manage_production"
    MANAGE_CONTRIBUTORS = "manage_contributors"
    VIEW_ALL_TITLES = "view_all_titles"
    VIEW_OWN_TITLES = "view_own_titles"


ROLE_CAPABILITIES: dict[UserRole, frozenset[Capability]] = {
    UserRole.PUBLISHER_OWNER: frozenset(Capability),
    UserRole.MANAGING_EDITOR: frozenset({
        Capability.EDIT_TITLES,
        Capability.MANAGE_PRODUCTION,
        Capability.MANAGE_CONTRIBUTORS,
        Capability.VIEW_ALL_TITLES,
    }),
    UserRole.PRODUCTION_STAFF: frozenset({
        Capability.EDIT_TITLES,
        Capability.MANAGE_PRODUCTION,
        Capability.VIEW_ALL_TITLES,
    }),
    UserRole.SALES_MARKETING: frozenset({
        Capability.EDIT_CUSTOMERS,
        Capability.VIEW_ALL_TITLES,
    }),
    UserRole.WAREHOUSE_OPERATIONS: frozenset({
        Capability.FULFILL_ORDERS,
        Capability.MANAGE_INVENTORY,
        Capability.VIEW_ALL_TITLES,
    }),
    UserRole.ACCOUNTING: frozenset({
        Capability.SEE_COSTS,
        Capability.ACCESS_FINANCIALS,
        Capability.VIEW_ALL_TITLES,
    }),
    UserRole.AUTHOR: frozenset({Capability.VIEW_OWN_TITLES}),
    UserRole.ILLUSTRATOR: frozenset({Capability.VIEW_OWN_TITLES}),
}

# Highest privilege first
ROLE_PRIORITY: tuple[UserRole, ...] = (
    UserRole.PUBLISHER_OWNER,
    UserRole.MANAGING_EDITOR,
    UserRole.ACCOUNTING,
    UserRole.SALES_MARKETING,
    UserRole.PRODUCTION_STAFF,
    UserRole.WAREHOUSE_OPERATIONS,
    UserRole.AUTHOR,
    UserRole.ILLUSTRATOR,
)

ROLE_DISPLAY_NAMES: dict[UserRole, str] = {
    UserRole.PUBLISHER_OWNER: "Publisher/Owner",
    UserRole.MANAGING_EDITOR: "Managing Editor",
    UserRole.PRODUCTION_STAFF: "Production Staff",
    UserRole.SALES_MARKETING: "Sales & Marketing",
    UserRole.WAREHOUSE_OPERATIONS: "Warehouse Operations",
    UserRole.ACCOUNTING: "Accounting",
    UserRole.AUTHOR: "Author",
    UserRole.ILLUSTRATOR: "Illustrator",
}


def parse_roles(raw: Iterable[object] | None) -> list[UserRole]:
    """Validate a loosely typed role list into ``UserRole`` values.

    Raises ``ValueError`` on the first unknown value. Duplicates are dropped.
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        raw = [raw]
    roles: list[UserRole] = []
    for value in raw:
        try:
            role = UserRole(value)
        except ValueError:
            raise ValueError(f"Unknown role: {value!r}") from None
        if role not in roles:
            roles.append(role)
    return roles


def capabilities_for(roles: Iterable[UserRole]) -> frozenset[Capability]:
    granted: set[Capability] = set()
    for role in roles:
        granted |= ROLE_CAPABILITIES[role]
    return frozenset(granted)


def has_capability(roles: Iterable[UserRole], capability: Capability) -> bool:
    """True if any role grants ``capability``. An empty list grants nothing."""
    return any(capability in ROLE_CAPABILITIES[role] for role in roles)


def can_invite_users(roles: Iterable[UserRole]) -> bool:
    return has_capability(roles, Capability.INVITE_USERS)


def can_manage_settings(roles: Iterable[UserRole]) -> bool:
    return has_capability(roles, Capability.MANAGE_SETTINGS)


def can_edit_titles(roles: Iterable[UserRole]) -> bool:
    return has_capability(roles, Capability.EDIT_TITLES)


def can_see_costs(roles: Iterable[UserRole]) -> bool:
    return has_capability(roles, Capability.SEE_COSTS)


def can_edit_customers(roles: Iterable[UserRole]) -> bool:
    return has_capability(roles, Capability.EDIT_CUSTOMERS)


def can_fulfill_orders(roles: Iterable[UserRole]) -> bool:
    return has_capability(roles, Capability.FULFILL_ORDERS)


def can_manage_inventory(roles: Iterable[UserRole]) -> bool:
    return has_capability(roles, Capability.MANAGE_INVENTORY)


def can_access_financials(roles: Iterable[UserRole]) -> bool:
    return has_capability(roles, Capability.ACCESS_FINANCIALS)


def can_manage_production(roles: Iterable[UserRole]) -> bool:
    return has_capability(roles, Capability.MANAGE_PRODUCTION)


def can_manage_contributors(roles: Iterable[UserRole]) -> bool:
    return has_capability(roles, Capability.MANAGE_CONTRIBUTORS)


def can_view_all_titles(roles: Iterable[UserRole]) -> bool:
    return has_capability(roles, Capability.VIEW_ALL_TITLES)


def highest_privilege_role(roles: Iterable[UserRole]) -> UserRole | None:
    held = set(roles)
    for role in ROLE_PRIORITY:
        if role in held:
            return role
    return None


def role_display_name(role: UserRole | str) -> str:
    try:
        return ROLE_DISPLAY_NAMES[UserRole(role)]
    except ValueError:
        return str(role)
