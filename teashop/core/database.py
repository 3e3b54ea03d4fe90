"""
Database engine, session factory and declarative base
"""
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, declarative_base
from .config import settings


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def build_engine(url: str = None, **kwargs) -> Engine:
    """Engine for the orders database; SQLite is accepted for local runs and tests"""
    url = url or settings.DATABASE_URL
    connect_args = kwargs.pop("connect_args", {})
    if _is_sqlite(url):
        # Webhook work hops between thread pool workers
        connect_args.setdefault("check_same_thread", False)

    new_engine = create_engine(
        url,
        connect_args=connect_args,
        pool_pre_ping=True,
        echo=kwargs.pop("echo", settings.DEBUG),
        **kwargs,
    )

    # WAL lets readers poll order status while a webhook is writing
    if _is_sqlite(url) and url not in ("sqlite://", "sqlite:///:memory:"):
        @event.listens_for(new_engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.close()

    return new_engine


engine = build_engine()

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for models
Base = declarative_base()

# Dependency for FastAPI
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
