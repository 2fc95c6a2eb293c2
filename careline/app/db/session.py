from __future__ import annotations

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from careline.app.core.config import DATABASE_URL, SQLITE_BUSY_TIMEOUT


def build_engine(url: str) -> Engine:
    """
    Crée l'engine SQLAlchemy.

    Postgres : config standard, le verrou de ligne de l'UPDATE conditionnel suffit.
    SQLite : chaque transaction démarre en BEGIN IMMEDIATE pour que les
    écrivains concurrents s'attendent au lieu d'échouer en "database is locked".
    """
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)

    engine = create_engine(
        url,
        connect_args={"check_same_thread": False, "timeout": SQLITE_BUSY_TIMEOUT},
    )

    @event.listens_for(engine, "connect")
    def _sqlite_connect(dbapi_connection, connection_record):
        # on gère BEGIN nous-mêmes (pysqlite le fait mal)
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _sqlite_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def make_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(bind=bind, autoflush=False, autocommit=False)


engine = build_engine(DATABASE_URL)
SessionLocal = make_session_factory(engine)
