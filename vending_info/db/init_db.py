#!/usr/bin/env python3
"""Initialize the database with proper schema"""

import logging

from sqlalchemy.engine import Engine

from vending_info.db.base import Base

# Import all models explicitly to register them with SQLAlchemy
# This ensures all tables are created when create_all() is called
from vending_info.db import models as _models  # noqa: F401
from vending_info.db.seeds.payment_methods import seed_payment_methods
from vending_info.db.session import create_session_factory, session_scope

logger = logging.getLogger("vending_info.database")


def init_database(engine: Engine) -> None:
    """Create all tables and seed the payment method catalog"""
    try:
        logger.info("Creating database tables...")
        Base.metadata.create_all(bind=engine)

        # Log table info with structured data
        table_names = [table.name for table in Base.metadata.sorted_tables]
        logger.info("Created database tables", extra={
            "table_count": len(table_names),
            "tables": table_names
        })

        with session_scope(create_session_factory(engine)) as db:
            seed_payment_methods(db)

        logger.info("Database initialized successfully!")

    except Exception as e:
        logger.error(f"Error initializing database: {e}", extra={
            "error_type": type(e).__name__,
            "database_url": "[REDACTED]"  # Don't log connection strings
        })
        logger.error("Please check database connection settings and permissions.")
        raise


if __name__ == "__main__":
    from vending_info.core.config import settings
    from vending_info.db.session import create_db_engine

    init_database(create_db_engine(settings.DATABASE_URL))
