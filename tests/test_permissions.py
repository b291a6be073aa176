"""Role → capability policy."""

import pytest

from imprint.core.permissions import (
    Capability,
    can_access_financials,
    can_edit_customers,
    can_edit_titles,
    can_fulfill_orders,
    can_invite_users,
    can_manage_contributors,
    can_manage_inventory,
    can_manage_production,
    can_manage_settings,
    can_see_costs,
    can_view_all_titles,
    capabilities_for,
    has_capability,
    highest_privilege_role,
    parse_roles,
    role_display_name,
)
from imprint.models.user import UserRole

R = UserRole


def test_owner_holds_every_capability():
    assert capabilities_for([R.PUBLISHER_OWNER]) == frozenset(Capability)


@pytest.mark.parametrize("role", [r for r in R if r != R.PUBLISHER_OWNER])
def test_only_owner_may_invite_or_manage_settings(role):
    assert can_invite_users([role]) is False
    assert can_manage_settings([role]) is False


def test_owner_may_invite():
    assert can_invite_users([R.PUBLISHER_OWNER]) is True
    assert can_manage_settings([R.PUBLISHER_OWNER]) is True


@pytest.mark.parametrize("role", [R.AUTHOR, R.ILLUSTRATOR])
def test_contributors_only_see_their_own_titles(role):
    assert capabilities_for([role]) == frozenset({Capability.VIEW_OWN_TITLES})
    assert can_view_all_titles([role]) is False


def test_editorial_roles():
    assert can_edit_titles([R.MANAGING_EDITOR])
    assert can_manage_contributors([R.MANAGING_EDITOR])
    assert can_manage_production([R.PRODUCTION_STAFF])
    assert not can_manage_contributors([R.PRODUCTION_STAFF])
    assert not can_see_costs([R.MANAGING_EDITOR])


def test_operational_roles():
    assert can_edit_customers([R.SALES_MARKETING])
    assert can_fulfill_orders([R.WAREHOUSE_OPERATIONS])
    assert can_manage_inventory([R.WAREHOUSE_OPERATIONS])
    assert not can_edit_titles([R.WAREHOUSE_OPERATIONS])


def test_accounting_sees_money():
    assert can_see_costs([R.ACCOUNTING])
    assert can_access_financials([R.ACCOUNTING])
    assert not can_access_financials([R.SALES_MARKETING])


def test_capabilities_union_across_roles():
    roles = [R.SALES_MARKETING, R.ACCOUNTING]
    assert can_edit_customers(roles)
    assert can_see_costs(roles)
    assert not can_fulfill_orders(roles)


def test_empty_role_list_is_denied():
    assert has_capability([], Capability.VIEW_OWN_TITLES) is False
    assert can_view_all_titles([]) is False
    assert capabilities_for([]) == frozenset()


# ── parse_roles ───────────────────────────────────────────────

def test_parse_roles_validates_and_dedupes():
    assert parse_roles(["author", "accounting", "author"]) == [R.AUTHOR, R.ACCOUNTING]


def test_parse_roles_accepts_single_string_and_none():
    assert parse_roles("illustrator") == [R.ILLUSTRATOR]
    assert parse_roles(None) == []


def test_parse_roles_rejects_unknown():
    with pytest.raises(ValueError, match="Unknown role: 'admin'"):
        parse_roles(["author", "admin"])


# ── Display helpers ───────────────────────────────────────────

def test_highest_privilege_role():
    assert highest_privilege_role([R.AUTHOR, R.ACCOUNTING, R.PRODUCTION_STAFF]) == R.ACCOUNTING
    assert highest_privilege_role([R.ILLUSTRATOR, R.PUBLISHER_OWNER]) == R.PUBLISHER_OWNER
    assert highest_privilege_role([]) is None


def test_role_display_name():
    assert role_display_name(R.SALES_MARKETING) == "Sales & Marketing"
    assert role_display_name("publisher_owner") == "Publisher/Owner"
    assert role_display_name("ghostwriter") == "ghostwriter"
