"""Unit tests for the role table and RolePolicy decisions."""

import unittest

from storefront.auth.errors import Forbidden, InvalidRole
from storefront.auth.policy import build_role_policy, get_role_policy
from storefront.auth.principal import Principal
from storefront.auth.roles import ROLE_CAPABILITY_GROUPS, Role, parse_role, valid_role_names


def principal(user_id: int, role: Role, is_verified: bool = True) -> Principal:
    return Principal(id=user_id, role=role, is_active=True, is_verified=is_verified)


class TestParseRole(unittest.TestCase):
    def test_known_values(self) -> None:
        for role in Role:
            self.assertIs(parse_role(role.value), role)
        self.assertIs(parse_role(Role.SELLER), Role.SELLER)

    def test_unknown_value_raises_with_valid_roles(self) -> None:
        for bad in ("superuser", "user", "", "Admin", None, 3):
            with self.assertRaises(InvalidRole) as cm:
                parse_role(bad)
            self.assertEqual(cm.exception.status_code, 400)
            self.assertEqual(
                cm.exception.to_payload()["valid_roles"],
                ["admin", "moderator", "seller", "customer"],
            )

    def test_valid_role_names_in_rank_order(self) -> None:
        self.assertEqual(valid_role_names(), ["admin", "moderator", "seller", "customer"])


class TestCapabilities(unittest.TestCase):
    def setUp(self) -> None:
        self.policy = get_role_policy()

    def test_admin_has_every_capability(self) -> None:
        for cap in ("view_users", "change_user_roles", "not_a_real_capability", "future_thing"):
            self.assertTrue(self.policy.has_capability(Role.ADMIN, cap))

    def test_non_admin_membership_matches_table(self) -> None:
        probes = {
            "view_users", "edit_users", "change_user_roles", "manage_categories",
            "create_products", "write_reviews", "moderate_reviews", "all", "unknown",
        }
        for role in (Role.MODERATOR, Role.SELLER, Role.CUSTOMER):
            configured = {c for caps in ROLE_CAPABILITY_GROUPS[role].values() for c in caps}
            for cap in probes:
                self.assertEqual(
                    self.policy.has_capability(role, cap),
                    cap in configured,
                    msg=f"{role.value}/{cap}",
                )

    def test_moderator_cannot_change_roles(self) -> None:
        self.assertTrue(self.policy.has_capability(Role.MODERATOR, "edit_users"))
        self.assertFalse(self.policy.has_capability(Role.MODERATOR, "change_user_roles"))

    def test_ranks_and_order(self) -> None:
        self.assertEqual(
            self.policy.roles_by_rank(),
            [Role.ADMIN, Role.MODERATOR, Role.SELLER, Role.CUSTOMER],
        )
        self.assertEqual(self.policy.rank(Role.ADMIN), 1)
        self.assertEqual(self.policy.rank(Role.CUSTOMER), 4)

    def test_rank_at_least_is_membership(self) -> None:
        self.assertTrue(self.policy.rank_at_least(Role.SELLER, {Role.ADMIN, Role.SELLER}))
        self.assertFalse(self.policy.rank_at_least(Role.MODERATOR, {Role.ADMIN, Role.SELLER}))


class TestPolicyIsImmutable(unittest.TestCase):
    def test_grants_cannot_be_mutated(self) -> None:
        policy = build_role_policy()
        with self.assertRaises(TypeError):
            policy.grants[Role.CUSTOMER] = policy.grants[Role.ADMIN]  # type: ignore[index]
        with self.assertRaises(TypeError):
            policy.capability_groups(Role.SELLER)["extra"] = ("x",)  # type: ignore[index]
        with self.assertRaises(AttributeError):
            policy.capabilities(Role.SELLER).add("edit_users")  # type: ignore[attr-defined]

    def test_missing_role_grant_rejected(self) -> None:
        policy = build_role_policy()
        partial = {Role.ADMIN: policy.grants[Role.ADMIN]}
        with self.assertRaises(ValueError):
            type(policy)(grants=partial)

    def test_alternative_table(self) -> None:
        policy = build_role_policy({Role.CUSTOMER: {"general": ("view_catalog",)}})
        self.assertTrue(policy.has_capability(Role.CUSTOMER, "view_catalog"))
        self.assertFalse(policy.has_capability(Role.CUSTOMER, "write_reviews"))
        self.assertFalse(policy.has_capability(Role.ADMIN, "anything"))


class TestOwnership(unittest.TestCase):
    def setUp(self) -> None:
        self.policy = get_role_policy()
        self.staff = {Role.ADMIN, Role.MODERATOR}

    def test_customer_allowed_only_as_owner(self) -> None:
        customer = principal(10, Role.CUSTOMER)
        self.assertTrue(self.policy.can_access_owned(customer, self.staff, 10))
        self.assertFalse(self.policy.can_access_owned(customer, self.staff, 11))
        self.assertFalse(self.policy.can_access_owned(customer, self.staff, None))

    def test_listed_role_allowed_regardless_of_owner(self) -> None:
        moderator = principal(2, Role.MODERATOR)
        self.assertTrue(self.policy.can_access_owned(moderator, self.staff, 99))
        self.assertTrue(self.policy.can_access_owned(moderator, self.staff, None))


class TestRoleChange(unittest.TestCase):
    def setUp(self) -> None:
        self.policy = get_role_policy()
        self.admin = principal(1, Role.ADMIN)

    def test_promoting_someone_else_to_admin_is_forbidden(self) -> None:
        for requester in (self.admin, principal(2, Role.MODERATOR)):
            with self.assertRaises(Forbidden) as cm:
                self.policy.check_role_change(requester, 5, "customer", "admin")
            self.assertEqual(cm.exception.message, "Only self-promotion to admin is allowed")

    def test_changing_another_admin_is_forbidden(self) -> None:
        with self.assertRaises(Forbidden) as cm:
            self.policy.check_role_change(self.admin, 7, "admin", "customer")
        self.assertEqual(cm.exception.message, "Cannot change role of admin user")

    def test_self_change_is_allowed(self) -> None:
        self.assertIs(self.policy.check_role_change(self.admin, 1, "admin", "admin"), Role.ADMIN)
        self.assertIs(
            self.policy.check_role_change(self.admin, 1, "admin", "moderator"), Role.MODERATOR
        )

    def test_ordinary_change(self) -> None:
        self.assertIs(self.policy.check_role_change(self.admin, 5, "customer", "seller"), Role.SELLER)

    def test_invalid_role_checked_first(self) -> None:
        with self.assertRaises(InvalidRole):
            self.policy.check_role_change(self.admin, 7, "admin", "superuser")


class TestDeactivation(unittest.TestCase):
    def setUp(self) -> None:
        self.policy = get_role_policy()

    def test_other_admin_is_protected(self) -> None:
        for requester in (principal(1, Role.ADMIN), principal(2, Role.MODERATOR)):
            with self.assertRaises(Forbidden) as cm:
                self.policy.check_deactivation(requester, 9, "admin")
            self.assertEqual(cm.exception.message, "Cannot deactivate admin user")

    def test_self_and_non_admin_targets_allowed(self) -> None:
        self.policy.check_deactivation(principal(1, Role.ADMIN), 1, "admin")
        self.policy.check_deactivation(principal(2, Role.MODERATOR), 9, "seller")


if __name__ == "__main__":
    unittest.main()
