from contextlib import contextmanager
from sqlalchemy import create_engine, event
from sqlalchemy.engine import make_url
from sqlalchemy.orm import Session, sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from app.core.config import settings
import logging

logger = logging.getLogger(__name__)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def is_sqlite_memory(url: str) -> bool:
    database = make_url(url).database
    return not database or database == ":memory:"


def build_engine(url: str, echo: bool = False):
    """
    Crea el engine según el tipo de base de datos.

    SQLite en memoria usa una única conexión compartida para que la base
    sobreviva entre sesiones. SQLite en archivo usa el pool por defecto,
    una conexión por sesión, para que cada transacción quede aislada.
    """
    if url.startswith("sqlite"):
        options = {"connect_args": {"check_same_thread": False}, "echo": echo}
        if is_sqlite_memory(url):
            options["poolclass"] = StaticPool
        sqlite_engine = create_engine(url, **options)
        event.listen(sqlite_engine, "connect", _enable_sqlite_foreign_keys)
        return sqlite_engine

    return create_engine(
        url,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20,
        echo=echo
    )


engine = build_engine(
    settings.database_url,
    echo=settings.DEBUG and settings.ENVIRONMENT != "test"
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Genera una sesión de base de datos por request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session):
    """
    Ejecuta un bloque de trabajo como una sola transacción.

    Hace commit si el bloque termina normalmente; ante cualquier excepción
    hace rollback y la propaga. La sesión se libera en get_db.
    """
    try:
        yield db
        db.commit()
    except Exception as e:
        logger.error(f"Transaction rolled back: {e!r}")
        db.rollback()
        raise
