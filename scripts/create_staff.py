#!/usr/bin/env python3
"""
Create (or promote) a staff account able to manage products and promo codes.

Usage:
  python scripts/create_staff.py --username alice --password 'long-secret' [--role manager]
"""
from __future__ import annotations

import argparse
import getpass
import sys

from storefront.db.create_tables import create_all
from storefront.domain import accounts
from storefront.services.auth_service import AuthService, RegistrationError


def main() -> None:
    ap = argparse.ArgumentParser(description="Create a staff user")
    ap.add_argument("--username", required=True, help="Login name (3-30 chars [a-z0-9_.-])")
    ap.add_argument("--password", help="Password (prompted when omitted)")
    ap.add_argument("--role", default="admin", choices=sorted(accounts.ROLES), help="Role (default: admin)")
    args = ap.parse_args()

    password = args.password or getpass.getpass("Password: ")
    create_all()
    try:
        user = AuthService().create_staff(args.username, password, args.role)
    except RegistrationError as exc:
        raise SystemExit(exc.message) from exc
    print("OK: staff user ready")
    print(f"  ID: {user.id}")
    print(f"  Username: {user.username}")
    print(f"  Role: {user.role}")


if __name__ == "__main__":
    try:
        main()
    except SystemExit:
        raise
    except Exception as exc:  # pragma: no cover - CLI usage
        sys.stderr.write(f"Error: {exc}\n")
        raise SystemExit(1)
