"""API tests for user administration: listing, role changes and activation toggles."""

import unittest

from storefront.auth.roles import Role
from storefront.models import User
from tests.support import ApiTestCase

PREFIX = "/api/v1/users"


class UsersTestCase(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.admin_id = self.make_user("admin", role=Role.ADMIN)
        self.moderator_id = self.make_user("moderator", role=Role.MODERATOR)
        self.seller_id = self.make_user("seller1", role=Role.SELLER)
        self.customer_id = self.make_user("customer1")


class TestListUsers(UsersTestCase):
    def test_staff_can_list(self) -> None:
        for user_id in (self.admin_id, self.moderator_id):
            resp = self.client.get(PREFIX, headers=self.auth(user_id))
            self.assertEqual(resp.status_code, 200)
            self.assertEqual(resp.json()["count"], 4)

    def test_customer_cannot_list(self) -> None:
        resp = self.client.get(PREFIX, headers=self.auth(self.customer_id))
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(
            resp.json()["message"],
            "Access denied. Required roles: admin, moderator. Your role: customer",
        )

    def test_get_one(self) -> None:
        resp = self.client.get(f"{PREFIX}/{self.seller_id}", headers=self.auth(self.moderator_id))
        self.assertEqual(resp.json()["data"]["username"], "seller1")
        missing = self.client.get(f"{PREFIX}/999", headers=self.auth(self.moderator_id))
        self.assertEqual(missing.status_code, 404)


class TestRoleChange(UsersTestCase):
    def put_role(self, requester: int, target: int, role: str):
        return self.client.put(
            f"{PREFIX}/{target}/role", json={"role": role}, headers=self.auth(requester)
        )

    def test_admin_assigns_role(self) -> None:
        resp = self.put_role(self.admin_id, self.customer_id, "seller")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["data"]["role"], "seller")
        self.assertEqual(self.get_row(User, self.customer_id).role, "seller")

    def test_admin_cannot_promote_someone_else_to_admin(self) -> None:
        resp = self.put_role(self.admin_id, self.customer_id, "admin")
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["message"], "Only self-promotion to admin is allowed")
        self.assertEqual(self.get_row(User, self.customer_id).role, "customer")

    def test_cannot_change_another_admin(self) -> None:
        other_admin = self.make_user("admin2", role=Role.ADMIN)
        resp = self.put_role(self.admin_id, other_admin, "customer")
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["message"], "Cannot change role of admin user")

    def test_invalid_role_lists_valid_roles(self) -> None:
        resp = self.put_role(self.admin_id, self.customer_id, "superuser")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["valid_roles"], ["admin", "moderator", "seller", "customer"])

    def test_moderator_lacks_capability(self) -> None:
        resp = self.put_role(self.moderator_id, self.customer_id, "seller")
        self.assertEqual(resp.status_code, 403)

    def test_unknown_target(self) -> None:
        self.assertEqual(self.put_role(self.admin_id, 999, "seller").status_code, 404)


class TestToggleActive(UsersTestCase):
    def toggle(self, requester: int, target: int):
        return self.client.patch(f"{PREFIX}/{target}/toggle-active", headers=self.auth(requester))

    def test_moderator_cannot_deactivate_admin(self) -> None:
        resp = self.toggle(self.moderator_id, self.admin_id)
        self.assertEqual(resp.status_code, 403)
        self.assertEqual(resp.json()["message"], "Cannot deactivate admin user")
        self.assertTrue(self.get_row(User, self.admin_id).is_active)

    def test_toggle_twice_restores_state(self) -> None:
        first = self.toggle(self.moderator_id, self.seller_id)
        self.assertEqual(first.status_code, 200)
        self.assertFalse(first.json()["data"]["is_active"])
        second = self.toggle(self.moderator_id, self.seller_id)
        self.assertEqual(second.status_code, 200)
        self.assertTrue(second.json()["data"]["is_active"])
        self.assertTrue(self.get_row(User, self.seller_id).is_active)

    def test_deactivation_blocks_next_request(self) -> None:
        headers = self.auth(self.seller_id)
        self.assertEqual(self.client.get("/api/v1/auth/me", headers=headers).status_code, 200)
        self.toggle(self.admin_id, self.seller_id)
        self.assertEqual(self.client.get("/api/v1/auth/me", headers=headers).status_code, 401)

    def test_role_change_applies_without_new_token(self) -> None:
        headers = self.auth(self.customer_id)
        self.assertEqual(self.client.get(PREFIX, headers=headers).status_code, 403)
        self.client.put(
            f"{PREFIX}/{self.customer_id}/role",
            json={"role": "moderator"},
            headers=self.auth(self.admin_id),
        )
        self.assertEqual(self.client.get(PREFIX, headers=headers).status_code, 200)

    def test_seller_cannot_toggle(self) -> None:
        self.assertEqual(self.toggle(self.seller_id, self.customer_id).status_code, 403)


if __name__ == "__main__":
    unittest.main()
