"""
Database helper utilities for the Vending Machine Info API.

Provides database-agnostic health information for both SQLite and PostgreSQL.
"""

import logging
from typing import Any, Dict

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from vending_info.core.security import sanitize_error_message

logger = logging.getLogger(__name__)


def get_database_type(engine: Engine) -> str:
    """
    Get the database type from the engine dialect.

    Returns:
        str: Database type ('sqlite', 'postgresql', etc.)
    """
    return engine.dialect.name


def get_database_info(engine: Engine) -> Dict[str, Any]:
    """
    Get database connection information and metadata.

    Returns:
        Dict containing database type, connection status, and metadata
    """
    db_type = get_database_type(engine)
    info: Dict[str, Any] = {
        "type": db_type,
        "connected": False,
        "tables": [],
        "version": None,
        "error": None
    }

    try:
        with engine.connect() as conn:
            info["connected"] = True

            if db_type == "sqlite":
                info["version"] = conn.execute(text("SELECT sqlite_version()")).scalar()
            elif db_type == "postgresql":
                version_str = conn.execute(text("SELECT version()")).scalar()
                # Extract just the version number
                info["version"] = version_str.split()[1] if version_str else "unknown"

        info["tables"] = inspect(engine).get_table_names()

    except SQLAlchemyError as e:
        logger.error(f"Database connection error: {e}")
        info["error"] = sanitize_error_message(str(e))

    return info


def check_database_health(engine: Engine) -> Dict[str, Any]:
    """
    Perform database health check.

    Returns:
        Dict containing health status and metrics
    """
    health: Dict[str, Any] = {
        "status": "healthy",
        "database_type": get_database_type(engine),
        "connected": False,
        "table_count": 0,
        "last_error": None
    }

    db_info = get_database_info(engine)
    health["connected"] = db_info["connected"]
    health["table_count"] = len(db_info["tables"])

    if db_info["error"]:
        health["status"] = "unhealthy"
        health["last_error"] = db_info["error"]
    elif not db_info["connected"]:
        health["status"] = "unhealthy"
        health["last_error"] = "Unable to connect to database"
    elif health["table_count"] == 0:
        health["status"] = "warning"
        health["last_error"] = "No tables found - database may need initialization"

    return health
