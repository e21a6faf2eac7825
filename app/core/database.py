"""SQLAlchemy engine, session, dependency e migrazione automatica."""

import logging

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.config import get_database_url

logger = logging.getLogger(__name__)


def _engine_options(url: str) -> dict:
    """SQLite (test/sviluppo locale) vuole un pool statico; Postgres usa pre-ping."""
    if url.startswith("sqlite"):
        return {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
    return {"pool_pre_ping": True}


_database_url = get_database_url()

engine = create_engine(
    _database_url,
    echo=False,
    **_engine_options(_database_url),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db():
    """Dependency that yields a DB session. Caller must close."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


FIXTURE_COLUMNS: dict[str, str] = {
    "fpl_id": "INTEGER",
    "football_data_id": "INTEGER",
    "minutes_played": "INTEGER",
}


def migrate_fixture_columns() -> list[str]:
    """
    Migrazione automatica per fixtures.
    Aggiunge le colonne degli id provider e dei minuti giocati
    sui database creati prima della riconciliazione esplicita.

    Idempotente: controlla quali colonne esistono prima di agire.
    Ritorna l'elenco delle colonne aggiunte (vuoto se schema già aggiornato).
    """
    insp = inspect(engine)
    if "fixtures" not in insp.get_table_names():
        return []

    existing_cols = {col["name"] for col in insp.get_columns("fixtures")}
    added = []
    with engine.begin() as conn:
        for col_name, col_type in FIXTURE_COLUMNS.items():
            if col_name not in existing_cols:
                conn.execute(text(f"ALTER TABLE fixtures ADD COLUMN {col_name} {col_type}"))
                added.append(col_name)

    if added:
        logger.info("fixtures: aggiunte %s colonne: %s", len(added), added)
    else:
        logger.info("fixtures: schema già aggiornato, nessuna modifica")
    return added


def init_db() -> None:
    """
    Crea tutte le tabelle e applica migrazioni automatiche.
    I modelli devono essere importati prima per registrare i metadata.
    """
    from app.models import (  # noqa: F401
        fixture,
        lineup,
        player,
        player_event,
        room,
        team,
        user,
    )

    Base.metadata.create_all(bind=engine)
    logger.info("create_all completato")

    try:
        migrate_fixture_columns()
    except Exception as e:
        logger.exception("Errore durante migrazione fixtures: %s", e)
