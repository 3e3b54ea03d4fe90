from sqlalchemy.pool import StaticPool

from teashop.core.database import build_engine


def test_file_database_uses_wal(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'orders.db'}", echo=False)
    with engine.connect() as conn:
        assert conn.exec_driver_sql("PRAGMA journal_mode").scalar() == "wal"
    engine.dispose()


def test_memory_database_is_shareable_across_threads():
    engine = build_engine("sqlite://", poolclass=StaticPool, echo=False)
    with engine.connect() as conn:
        assert conn.exec_driver_sql("SELECT 1").scalar() == 1
    assert engine.pool.__class__ is StaticPool
    engine.dispose()
