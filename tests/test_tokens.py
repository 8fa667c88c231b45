"""Unit tests for TokenService: issue, decode and failure reasons."""

import unittest
from datetime import UTC, datetime, timedelta

import jwt

from storefront.auth.errors import TokenInvalid
from storefront.auth.tokens import TokenService

SECRET = "unit-test-secret"


class TestTokenRoundTrip(unittest.TestCase):
    def setUp(self) -> None:
        self.tokens = TokenService(SECRET, expire_minutes=30)

    def test_issue_and_verify(self) -> None:
        token = self.tokens.issue(42, version=3)
        claims = self.tokens.decode(token)
        self.assertEqual(claims.user_id, 42)
        self.assertEqual(claims.version, 3)
        self.assertEqual(self.tokens.verify(token), 42)
        self.assertAlmostEqual(
            (claims.expires_at - claims.issued_at).total_seconds(), 30 * 60, delta=1
        )

    def test_payload_carries_no_role(self) -> None:
        payload = jwt.decode(self.tokens.issue(1), SECRET, algorithms=["HS256"])
        self.assertEqual(set(payload), {"sub", "iat", "exp", "ver", "type"})


class TestTokenFailures(unittest.TestCase):
    def setUp(self) -> None:
        self.tokens = TokenService(SECRET)

    def _reason(self, token: str) -> str:
        with self.assertRaises(TokenInvalid) as cm:
            self.tokens.decode(token)
        self.assertEqual(cm.exception.status_code, 401)
        self.assertEqual(cm.exception.message, "Invalid or expired token")
        return cm.exception.reason

    def test_expired(self) -> None:
        past = datetime.now(UTC) - timedelta(hours=2)
        token = jwt.encode(
            {"sub": "1", "iat": past, "exp": past + timedelta(minutes=1)}, SECRET, algorithm="HS256"
        )
        self.assertEqual(self._reason(token), "expired")

    def test_forged_signature(self) -> None:
        token = TokenService("another-secret").issue(1)
        self.assertEqual(self._reason(token), "signature")

    def test_garbage(self) -> None:
        self.assertEqual(self._reason("not.a.jwt"), "malformed")
        self.assertEqual(self._reason(""), "malformed")

    def test_missing_required_claim(self) -> None:
        token = jwt.encode(
            {"exp": datetime.now(UTC) + timedelta(minutes=5), "iat": datetime.now(UTC)},
            SECRET,
            algorithm="HS256",
        )
        self.assertEqual(self._reason(token), "malformed")

    def test_non_numeric_subject(self) -> None:
        now = datetime.now(UTC)
        token = jwt.encode(
            {"sub": "alice", "iat": now, "exp": now + timedelta(minutes=5)}, SECRET, algorithm="HS256"
        )
        self.assertEqual(self._reason(token), "malformed")

    def test_wrong_token_type(self) -> None:
        now = datetime.now(UTC)
        token = jwt.encode(
            {"sub": "1", "iat": now, "exp": now + timedelta(minutes=5), "type": "refresh"},
            SECRET,
            algorithm="HS256",
        )
        self.assertEqual(self._reason(token), "malformed")


if __name__ == "__main__":
    unittest.main()
