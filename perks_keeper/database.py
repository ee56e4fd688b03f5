"""Database connection, session management and schema upgrades."""
from collections.abc import Generator
from contextlib import contextmanager
import logging
from pathlib import Path

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from perks_keeper.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

# Schema version 3 is the current record layout; revision ids mirror the version numbers.
SCHEMA_VERSION = 3
SCHEMA_REVISIONS = {1: "v1", 2: "v2", 3: "v3"}

# SQLite requires check_same_thread=False for FastAPI
connect_args = {"check_same_thread": False} if "sqlite" in settings.database_url else {}


def configure_sqlite_engine(engine: Engine) -> Engine:
    """Make every SQLAlchemy transaction a ``BEGIN IMMEDIATE`` on SQLite.

    pysqlite defers BEGIN until the first write, so a read-modify-write
    (the lifetime stats row) could observe a stale read. Taking the write
    lock at begin serializes conflicting writers for the whole transaction.
    """

    @event.listens_for(engine, "connect")
    def disable_pysqlite_transactions(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def begin_immediate(conn) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


engine = create_engine(
    settings.database_url,
    connect_args=connect_args,
    echo=settings.debug,
)

if engine.dialect.name == "sqlite":
    configure_sqlite_engine(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """Dependency that provides a database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def atomic(db: Session) -> Generator[Session, None, None]:
    """Run a unit of work on ``db`` that either commits whole or not at all."""
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def ensure_sqlite_directory(database_url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    url = make_url(database_url)
    if url.get_backend_name() != "sqlite":
        return
    database_path = url.database or ""
    if not database_path or database_path == ":memory:":
        return
    Path(database_path).parent.mkdir(parents=True, exist_ok=True)


def get_alembic_config(database_url: str | None = None) -> Config:
    """Build an Alembic config pointing at the bundled migration scripts."""
    url = database_url or settings.database_url
    config = Config()
    config.set_main_option("script_location", str(settings.migrations_dir))
    # ConfigParser interpolation treats % as a format marker.
    config.set_main_option("sqlalchemy.url", url.replace("%", "%%"))
    return config


def upgrade_database(database_url: str | None = None, revision: str = "head") -> None:
    """Upgrade the store to ``revision``, applying each pending step once, in order."""
    url = database_url or settings.database_url
    ensure_sqlite_directory(url)
    logger.info(f"Upgrading database schema to {revision}")
    command.upgrade(get_alembic_config(url), revision)


def current_schema_revision(bind: Engine) -> str | None:
    """Return the revision the store is stamped with, or None for an empty store."""
    with bind.connect() as connection:
        return MigrationContext.configure(connection).get_current_revision()
