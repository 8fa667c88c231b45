"""API tests for categories and products: public reads, role and ownership checks."""

import unittest

from storefront.auth.roles import Role
from storefront.models import Category, Product
from tests.support import ApiTestCase

CATEGORIES = "/api/v1/categories"
PRODUCTS = "/api/v1/products"


class CatalogTestCase(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.admin_id = self.make_user("admin", role=Role.ADMIN)
        self.moderator_id = self.make_user("moderator", role=Role.MODERATOR)
        self.seller_id = self.make_user("seller1", role=Role.SELLER)
        self.other_seller_id = self.make_user("seller2", role=Role.SELLER)
        self.customer_id = self.make_user("customer1")
        self.category_id = self.make_category("Books", created_by=self.moderator_id)


class TestCategories(CatalogTestCase):
    def test_public_reads(self) -> None:
        resp = self.client.get(CATEGORIES)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["count"], 1)
        one = self.client.get(f"{CATEGORIES}/{self.category_id}").json()["data"]
        self.assertEqual(one["name"], "Books")
        self.assertEqual(one["created_by_username"], "moderator")
        self.assertEqual(self.client.get(f"{CATEGORIES}/999").status_code, 404)

    def test_create_requires_manage_categories(self) -> None:
        resp = self.client.post(
            CATEGORIES, json={"name": "Games"}, headers=self.auth(self.seller_id)
        )
        self.assertEqual(resp.status_code, 403)
        resp = self.client.post(
            CATEGORIES, json={"name": "Games"}, headers=self.auth(self.moderator_id)
        )
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()["data"]["created_by"], self.moderator_id)

    def test_duplicate_name(self) -> None:
        resp = self.client.post(CATEGORIES, json={"name": "Books"}, headers=self.auth(self.admin_id))
        self.assertEqual(resp.status_code, 400)

    def test_update_by_staff(self) -> None:
        resp = self.client.put(
            f"{CATEGORIES}/{self.category_id}",
            json={"description": "Paper things"},
            headers=self.auth(self.admin_id),
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.get_row(Category, self.category_id).description, "Paper things")

    def test_update_by_non_owner_seller(self) -> None:
        resp = self.client.put(
            f"{CATEGORIES}/{self.category_id}", json={"name": "X"}, headers=self.auth(self.seller_id)
        )
        self.assertEqual(resp.status_code, 403)

    def test_delete_refused_while_products_exist(self) -> None:
        self.make_product(self.category_id, created_by=self.seller_id)
        resp = self.client.delete(f"{CATEGORIES}/{self.category_id}", headers=self.auth(self.admin_id))
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Cannot delete category with existing products")

    def test_delete_empty_category(self) -> None:
        empty_id = self.make_category("Empty", created_by=self.admin_id)
        resp = self.client.delete(f"{CATEGORIES}/{empty_id}", headers=self.auth(self.moderator_id))
        self.assertEqual(resp.status_code, 200)
        self.assertIsNone(self.get_row(Category, empty_id))


class TestProductReads(CatalogTestCase):
    def test_list_filter_search_and_pagination(self) -> None:
        games_id = self.make_category("Games")
        for i in range(3):
            self.make_product(self.category_id, name=f"Novel {i}")
        self.make_product(games_id, name="Chess set")

        resp = self.client.get(PRODUCTS, params={"limit": 2})
        body = resp.json()
        self.assertEqual(body["count"], 2)
        self.assertEqual(body["pagination"]["total_items"], 4)
        self.assertEqual(body["pagination"]["total_pages"], 2)
        self.assertTrue(body["pagination"]["has_next"])

        by_category = self.client.get(PRODUCTS, params={"category_id": games_id}).json()
        self.assertEqual([p["name"] for p in by_category["data"]], ["Chess set"])

        search = self.client.get(PRODUCTS, params={"search": "novel"}).json()
        self.assertEqual(search["pagination"]["total_items"], 3)

        nested = self.client.get(f"{PRODUCTS}/category/{games_id}").json()
        self.assertEqual(nested["count"], 1)
        self.assertEqual(self.client.get(f"{PRODUCTS}/category/999").status_code, 404)

    def test_get_one(self) -> None:
        product_id = self.make_product(self.category_id, created_by=self.seller_id)
        data = self.client.get(f"{PRODUCTS}/{product_id}").json()["data"]
        self.assertEqual(data["category_name"], "Books")
        self.assertEqual(data["created_by_username"], "seller1")
        self.assertEqual(self.client.get(f"{PRODUCTS}/999").status_code, 404)

    def test_limit_is_capped(self) -> None:
        resp = self.client.get(PRODUCTS, params={"limit": 5000})
        self.assertEqual(resp.json()["pagination"]["items_per_page"], 100)


class TestProductWrites(CatalogTestCase):
    def product_body(self, **overrides) -> dict:
        body = {"name": "Lamp", "price": 19.5, "category_id": self.category_id, "stock_quantity": 4}
        body.update(overrides)
        return body

    def test_seller_creates_owned_product(self) -> None:
        resp = self.client.post(PRODUCTS, json=self.product_body(), headers=self.auth(self.seller_id))
        self.assertEqual(resp.status_code, 201)
        self.assertEqual(resp.json()["data"]["created_by"], self.seller_id)

    def test_customer_cannot_create(self) -> None:
        resp = self.client.post(PRODUCTS, json=self.product_body(), headers=self.auth(self.customer_id))
        self.assertEqual(resp.status_code, 403)

    def test_unverified_seller_blocked(self) -> None:
        pending = self.make_user("pending", role=Role.SELLER, is_verified=False)
        resp = self.client.post(PRODUCTS, json=self.product_body(), headers=self.auth(pending))
        self.assertEqual(resp.status_code, 403)
        self.assertTrue(resp.json()["needsVerification"])

    def test_negative_price_and_unknown_category(self) -> None:
        headers = self.auth(self.seller_id)
        self.assertEqual(
            self.client.post(PRODUCTS, json=self.product_body(price=-1), headers=headers).status_code,
            400,
        )
        resp = self.client.post(PRODUCTS, json=self.product_body(category_id=999), headers=headers)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Category not found")

    def test_owner_can_update(self) -> None:
        product_id = self.make_product(self.category_id, created_by=self.seller_id)
        resp = self.client.put(
            f"{PRODUCTS}/{product_id}", json={"price": 12.0}, headers=self.auth(self.seller_id)
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.get_row(Product, product_id).price, 12.0)

    def test_non_owner_seller_cannot_update(self) -> None:
        product_id = self.make_product(self.category_id, created_by=self.other_seller_id)
        resp = self.client.put(
            f"{PRODUCTS}/{product_id}", json={"price": 1.0}, headers=self.auth(self.seller_id)
        )
        self.assertEqual(resp.status_code, 403)
        self.assertIn("(or resource owner)", resp.json()["message"])
        self.assertEqual(self.get_row(Product, product_id).price, 10.0)

    def test_moderator_can_update_any(self) -> None:
        product_id = self.make_product(self.category_id, created_by=self.seller_id)
        resp = self.client.put(
            f"{PRODUCTS}/{product_id}", json={"stock_quantity": 0}, headers=self.auth(self.moderator_id)
        )
        self.assertEqual(resp.status_code, 200)

    def test_update_missing_product(self) -> None:
        for requester in (self.seller_id, self.admin_id):
            resp = self.client.put(
                f"{PRODUCTS}/999", json={"price": 1.0}, headers=self.auth(requester)
            )
            self.assertEqual(resp.status_code, 404)

    def test_delete_rules(self) -> None:
        product_id = self.make_product(self.category_id, created_by=self.seller_id)
        moderator = self.client.delete(f"{PRODUCTS}/{product_id}", headers=self.auth(self.moderator_id))
        self.assertEqual(moderator.status_code, 403)
        owner = self.client.delete(f"{PRODUCTS}/{product_id}", headers=self.auth(self.seller_id))
        self.assertEqual(owner.status_code, 200)
        self.assertIsNone(self.get_row(Product, product_id))

    def test_admin_deletes_any(self) -> None:
        product_id = self.make_product(self.category_id, created_by=self.seller_id)
        resp = self.client.delete(f"{PRODUCTS}/{product_id}", headers=self.auth(self.admin_id))
        self.assertEqual(resp.status_code, 200)


if __name__ == "__main__":
    unittest.main()
