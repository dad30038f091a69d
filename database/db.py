"""
Database Configuration Module

The rule store lives in PostgreSQL in production. Local runs and the test
suite point DATABASE_URL at SQLite instead.

Connection Pooling Strategy:
- PostgreSQL: QueuePool, pool_size=10, max_overflow=10
- SQLite: one shared connection (StaticPool) so in-memory databases survive
  across sessions and threads
"""

import os
from datetime import datetime
from urllib.parse import quote_plus
import uuid as uuid
from pytz import timezone
from dotenv import load_dotenv

load_dotenv()

from sqlalchemy import Column, TIMESTAMP, Integer, Uuid, create_engine, event
from sqlalchemy.orm import Session, declarative_base
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import QueuePool, StaticPool

from logger import logging


# ============================================
# DATABASE CONNECTION CONFIGURATION
# ============================================

DBTYPE_POSTGRES = "postgresql"


def build_database_uri() -> str:
    """DATABASE_URL wins; otherwise assemble the PostgreSQL URI from its parts."""
    database_url = os.environ.get("DATABASE_URL", "").strip()
    if database_url:
        if database_url.startswith("postgres://"):
            database_url = "postgresql://" + database_url[len("postgres://") :]
        return database_url

    return "%s://%s:%s@%s:%s/%s" % (
        DBTYPE_POSTGRES,
        os.environ.get("db_user", "postgres"),
        quote_plus(os.environ.get("db_password", "")),
        os.environ.get("db_host", "localhost"),
        os.environ.get("db_port", "5432"),
        os.environ.get("db_name", "pincode_rules"),
    )


CORE_SQLALCHEMY_DATABASE_URI = build_database_uri()

# ============================================
# CONNECTION POOL SETTINGS
# ============================================

POSTGRES_POOL_CONFIG = {
    # Base pool size - always maintain this many connections
    "pool_size": int(os.environ.get("DB_POOL_SIZE", "10")),
    # Additional connections allowed during peak load
    "max_overflow": int(os.environ.get("DB_MAX_OVERFLOW", "10")),
    # Timeout waiting for a connection from pool (seconds)
    "pool_timeout": 30,
    # Test connection health before using (handles stale connections)
    "pool_pre_ping": True,
    # Recycle connections after 30 minutes
    "pool_recycle": 1800,
    "echo": False,
    "poolclass": QueuePool,
}

SQLITE_POOL_CONFIG = {
    "connect_args": {"check_same_thread": False},
    "poolclass": StaticPool,
    "echo": False,
}


def is_sqlite(uri: str) -> bool:
    return uri.startswith("sqlite")


db_engine = create_engine(
    CORE_SQLALCHEMY_DATABASE_URI,
    **(
        SQLITE_POOL_CONFIG
        if is_sqlite(CORE_SQLALCHEMY_DATABASE_URI)
        else POSTGRES_POOL_CONFIG
    ),
)

# ============================================
# SESSION CONFIGURATION
# ============================================

SessionLocal = sessionmaker(
    autoflush=False,  # Manual flush for better control
    bind=db_engine,
    expire_on_commit=False,  # Prevent attribute expiration on commit
)

UTC = timezone("UTC")


def time_now():
    """Get current UTC time"""
    return datetime.now(UTC)


# ============================================
# CONNECTION POOL MONITORING
# ============================================


@event.listens_for(db_engine, "checkout")
def receive_checkout(dbapi_connection, connection_record, connection_proxy):
    logging.debug("Connection checked out from pool")


@event.listens_for(db_engine, "checkin")
def receive_checkin(dbapi_connection, connection_record):
    logging.debug("Connection returned to pool")


# ============================================
# DECLARATIVE BASE
# ============================================

DBBase = declarative_base()


def init_models():
    """Create the tables and indexes that do not exist yet."""
    # models must be imported so they register on DBBase.metadata
    import models  # noqa: F401

    DBBase.metadata.create_all(bind=db_engine)
    logging.info("Database tables initialised")


# ============================================
# SESSION MANAGEMENT
# ============================================


def get_db():
    """
    Generator function for database session dependency injection.

    Usage in FastAPI:
        @router.get("/")
        def endpoint(db: Session = Depends(get_db)):
            ...

    Commits when the request finishes cleanly, rolls back when the
    request raised, and always closes the session.
    """
    db: Session = SessionLocal()
    try:
        logging.debug("DB session created")
        yield db
        logging.debug("Committing DB session")
        db.commit()

    except Exception as e:
        logging.error(f"DB session error: {e}")
        db.rollback()
        raise
    finally:
        logging.debug("Closing DB session")
        db.close()


# ============================================
# BASE MODEL CLASS
# ============================================


class DBBaseClass:
    """
    Base class for all database models.

    Provides:
    - Auto-incrementing primary key (id), never exposed by the API
    - UUID for external references
    - Created/updated timestamps
    """

    id = Column(Integer, primary_key=True, autoincrement=True)

    # UUID for external API references (don't expose internal IDs)
    uuid = Column(Uuid(as_uuid=True), default=uuid.uuid4, unique=True, nullable=False)

    created_at = Column(TIMESTAMP(timezone=True), default=time_now, nullable=False)
    updated_at = Column(
        TIMESTAMP(timezone=True),
        default=time_now,
        onupdate=time_now,
        nullable=False,
    )
