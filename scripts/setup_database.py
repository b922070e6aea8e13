#!/usr/bin/env python3
"""
Database setup script for the Vending Machine Info API.

Creates the tables, seeds the payment method catalog and purges expired
sessions. Works for both SQLite and PostgreSQL.
"""

import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy.exc import SQLAlchemyError

from vending_info.core.config import settings
from vending_info.core.security import sanitize_error_message
from vending_info.core.utils.database_helpers import check_database_health, get_database_info
from vending_info.db.init_db import init_database
from vending_info.db.session import create_db_engine, create_session_factory, session_scope
from vending_info.services.sessions import clean_expired_sessions


def main() -> bool:
    """Initialize database based on configuration"""
    print("🗄️  Vending Machine Info Database Setup")
    print("=" * 40)

    print(f"Database URL: {sanitize_error_message(settings.DATABASE_URL)}")

    engine = create_db_engine(settings.DATABASE_URL)
    db_info = get_database_info(engine)
    print(f"Database Type: {db_info['type']}")
    print(f"Connected: {db_info['connected']}")

    if db_info['error']:
        print(f"❌ Connection Error: {db_info['error']}")
        return False

    if db_info['version']:
        print(f"Database Version: {db_info['version']}")

    print(f"Existing Tables: {len(db_info['tables'])}")
    for table in sorted(db_info['tables']):
        print(f"  - {table}")

    print("\n🔧 Initializing database...")

    try:
        init_database(engine)
        print("✅ Database initialized successfully!")

        with session_scope(create_session_factory(engine)) as db:
            removed = clean_expired_sessions(db)
        print(f"Expired sessions removed: {removed}")

        health = check_database_health(engine)
        print(f"Health Status: {health['status']}")
        print(f"Table Count: {health['table_count']}")

        if health['status'] != 'healthy':
            print(f"⚠️  Warning: {health['last_error']}")

        return True

    except SQLAlchemyError as e:
        print(f"❌ Database initialization failed: {sanitize_error_message(str(e))}")
        return False
    finally:
        engine.dispose()


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
