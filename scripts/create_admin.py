#!/usr/bin/env python3
"""
Create an admin account.

The password is read from ADMIN_PASSWORD or prompted for, and is never
printed.

Usage:
    python scripts/create_admin.py admin@example.com "Admin User"
"""

import argparse
import getpass
import os
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from vending_info.core.config import settings
from vending_info.db.init_db import init_database
from vending_info.db.models.user import UserRole
from vending_info.db.session import create_db_engine, create_session_factory, session_scope
from vending_info.services.users import DuplicateEmailError, create_user

MIN_PASSWORD_LENGTH = 8


def read_password() -> str:
    password = os.environ.get("ADMIN_PASSWORD")
    if password:
        return password

    password = getpass.getpass("Password: ")
    if password != getpass.getpass("Repeat password: "):
        raise ValueError("Passwords do not match")
    return password


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Create an admin account")
    parser.add_argument("email")
    parser.add_argument("name", nargs="?", default="Admin")
    args = parser.parse_args(argv)

    try:
        password = read_password()
    except ValueError as e:
        print(f"❌ {e}")
        return 1

    if len(password) < MIN_PASSWORD_LENGTH:
        print(f"❌ Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return 1

    engine = create_db_engine(settings.DATABASE_URL)
    try:
        init_database(engine)
        with session_scope(create_session_factory(engine)) as db:
            user = create_user(db, args.email, password, args.name, UserRole.ADMIN.value)
            print(f"✅ Admin account created: {user.email} (id {user.id})")
    except DuplicateEmailError as e:
        print(f"❌ {e}")
        return 1
    except ValueError as e:
        print(f"❌ Invalid password: {e}")
        return 1
    finally:
        engine.dispose()

    return 0


if __name__ == "__main__":
    sys.exit(main())
