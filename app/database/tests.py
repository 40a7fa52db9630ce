"""
Tests for engine construction and the transaction scope.
"""

import pytest
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database.database import Base, build_engine, is_sqlite_memory, transaction
from app.modules.products.models import Product


@pytest.fixture
def file_engine(tmp_path):
    file_db = build_engine(f"sqlite:///{tmp_path / 'invoices.db'}")
    Base.metadata.create_all(bind=file_db)
    yield file_db
    file_db.dispose()


class TestBuildEngine:

    def test_memory_urls(self):
        assert is_sqlite_memory("sqlite://")
        assert is_sqlite_memory("sqlite:///:memory:")
        assert not is_sqlite_memory("sqlite:///./invoices.db")

    def test_memory_database_shares_one_connection(self):
        memory_db = build_engine("sqlite://")
        assert isinstance(memory_db.pool, StaticPool)
        memory_db.dispose()

    def test_file_database_uses_connection_per_session(self, file_engine):
        assert not isinstance(file_engine.pool, StaticPool)

    def test_foreign_keys_enabled_on_file_database(self, file_engine):
        with file_engine.connect() as conn:
            assert conn.exec_driver_sql("PRAGMA foreign_keys").scalar() == 1


class TestTransactionIsolation:

    def test_rollback_in_one_session_keeps_other_session_work(self, file_engine):
        Session = sessionmaker(autocommit=False, autoflush=False, bind=file_engine)
        first = Session()
        second = Session()
        try:
            first.add(Product(name="Tablet", default_price=250, stock_quantity=4))
            first.flush()

            with pytest.raises(RuntimeError):
                with transaction(second):
                    second.query(Product).count()
                    raise RuntimeError("boom")

            first.commit()
        finally:
            first.close()
            second.close()

        fresh = Session()
        try:
            assert fresh.query(Product).count() == 1
        finally:
            fresh.close()
