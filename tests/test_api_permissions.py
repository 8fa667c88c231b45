"""API tests for permission introspection endpoints."""

import unittest

from storefront.auth.roles import Role
from tests.support import ApiTestCase

PREFIX = "/api/v1/permissions"


class TestPermissionChecks(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.admin_id = self.make_user("admin", role=Role.ADMIN)
        self.seller_id = self.make_user("seller1", role=Role.SELLER)

    def test_check_single(self) -> None:
        headers = self.auth(self.seller_id)
        yes = self.client.get(f"{PREFIX}/check", params={"permission": "create_products"}, headers=headers)
        self.assertTrue(yes.json()["data"]["allowed"])
        no = self.client.get(f"{PREFIX}/check", params={"permission": "view_users"}, headers=headers)
        self.assertFalse(no.json()["data"]["allowed"])
        self.assertEqual(no.json()["data"]["message"], "User does not have permission: view_users")

    def test_admin_has_undefined_capability(self) -> None:
        resp = self.client.get(
            f"{PREFIX}/check", params={"permission": "does_not_exist"}, headers=self.auth(self.admin_id)
        )
        self.assertTrue(resp.json()["data"]["allowed"])

    def test_check_multiple_summary(self) -> None:
        resp = self.client.post(
            f"{PREFIX}/check-multiple",
            json={"permissions": ["create_products", "view_users", "reply_to_reviews"]},
            headers=self.auth(self.seller_id),
        )
        summary = resp.json()["data"]["summary"]
        self.assertEqual(summary["total_checked"], 3)
        self.assertEqual(summary["allowed_count"], 2)
        self.assertEqual(summary["denied_count"], 1)
        self.assertFalse(summary["all_allowed"])
        self.assertTrue(summary["any_allowed"])

    def test_my_permissions(self) -> None:
        data = self.client.get(
            f"{PREFIX}/my-permissions", headers=self.auth(self.seller_id)
        ).json()["data"]
        self.assertEqual(data["role"], "seller")
        self.assertEqual(data["hierarchy_level"], 3)
        self.assertIn("create_products", data["permissions"]["products"])
        self.assertIn("view_sales_statistics", data["permissions_flat"])

    def test_roles_overview_staff_only(self) -> None:
        self.assertEqual(
            self.client.get(f"{PREFIX}/roles", headers=self.auth(self.seller_id)).status_code, 403
        )
        data = self.client.get(f"{PREFIX}/roles", headers=self.auth(self.admin_id)).json()["data"]
        self.assertEqual(
            [r["id"] for r in data["roles"]], ["admin", "moderator", "seller", "customer"]
        )
        self.assertIn("all", data["permissions_by_role"]["admin"])

    def test_requires_token(self) -> None:
        self.assertEqual(self.client.get(f"{PREFIX}/my-permissions").status_code, 401)

    def test_unverified_user_can_introspect(self) -> None:
        pending = self.make_user("pending", is_verified=False)
        resp = self.client.get(f"{PREFIX}/my-permissions", headers=self.auth(pending))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["data"]["role"], "customer")
        resp = self.client.get(
            f"{PREFIX}/check", params={"permission": "create_orders"}, headers=self.auth(pending)
        )
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.json()["data"]["allowed"])


if __name__ == "__main__":
    unittest.main()
