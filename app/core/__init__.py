from app.core.config import get_database_url, is_production
from app.core.database import Base, SessionLocal, engine, get_db, init_db, migrate_fixture_columns

__all__ = [
    "get_database_url",
    "is_production",
    "Base",
    "SessionLocal",
    "engine",
    "get_db",
    "init_db",
    "migrate_fixture_columns",
]
