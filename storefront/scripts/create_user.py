"""
Create a user with any role (e.g. the first admin). Run from project root:
  python -m storefront.scripts.create_user USERNAME EMAIL PASSWORD [role] [--verified]
Example:
  python -m storefront.scripts.create_user admin admin@example.com your-secure-password admin
"""
import argparse
import sys

from storefront.auth.credentials import CredentialStore
from storefront.auth.roles import DEFAULT_ROLE, Role, valid_role_names
from storefront.core.database import SessionLocal
from storefront.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a Storefront user outside the registration flow.")
    parser.add_argument("username", help=f"Username ({USERNAME_MIN_LEN}-{USERNAME_MAX_LEN} chars)")
    parser.add_argument("email", help="Email address")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("role", nargs="?", default=DEFAULT_ROLE.value, choices=valid_role_names())
    parser.add_argument("--verified", action="store_true", help="Mark the email as already verified")
    args = parser.parse_args(argv)

    username = args.username.strip()
    email = args.email.strip().lower()
    if not USERNAME_MIN_LEN <= len(username) <= USERNAME_MAX_LEN:
        print("Invalid username length.", file=sys.stderr)
        return 1
    if "@" in username:
        print("Username must not contain '@'.", file=sys.stderr)
        return 1
    if "@" not in email:
        print("Invalid email address.", file=sys.stderr)
        return 1
    if not PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN:
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        store = CredentialStore(db)
        if store.find_by_username(username) or store.find_by_email(email):
            print(f"User '{username}' or email '{email}' already exists.", file=sys.stderr)
            return 1
        store.create(
            username=username,
            email=email,
            password=args.password,
            role=Role(args.role),
            is_verified=args.verified,
        )
        print(f"Created user '{username}' with role '{args.role}'.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
