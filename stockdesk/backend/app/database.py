"""
Database connection and session management
"""
from sqlalchemy import create_engine, pool
from sqlalchemy.orm import declarative_base, sessionmaker
from app.config import settings

if settings.is_sqlite:
    # SQLite (local development): one file, shared across the request threads
    engine = create_engine(
        settings.database_connection_string,
        connect_args={"check_same_thread": False},
        echo=settings.DEBUG,
    )
else:
    # Create engine with connection pooling and timeout
    engine = create_engine(
        settings.database_connection_string,
        poolclass=pool.QueuePool,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,  # Verify connections before using
        pool_recycle=3600,  # Recycle connections after 1 hour
        connect_args={
            "connect_timeout": 10,  # 10 second connection timeout
            "options": "-c statement_timeout=120000"  # 2 minute query timeout for large imports
        },
        echo=settings.DEBUG,
    )

# Session factory
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base class for models
Base = declarative_base()


def get_db():
    """
    Dependency for FastAPI to get database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None) -> None:
    """Create all tables that do not exist yet."""
    # Ensure models are imported so tables are registered on Base.metadata
    from app import models  # noqa: F401
    Base.metadata.create_all(bind=bind or engine)
