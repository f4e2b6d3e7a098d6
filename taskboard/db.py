# PURPOSE: create the SQLAlchemy engine and a Session factory.

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

from .config import settings

# Choose engine based on DATABASE_URL; apply SQLite-specific connect_args only when needed.
db_url = settings.DATABASE_URL

if db_url.startswith("sqlite"):
    # "timeout" bounds how long a writer waits on a locked database file
    engine = create_engine(
        db_url,
        connect_args={"check_same_thread": False, "timeout": settings.DB_TIMEOUT_SECONDS},
    )
else:
    engine = create_engine(
        db_url,
        pool_pre_ping=True,
        pool_timeout=settings.DB_TIMEOUT_SECONDS,
    )

# SessionLocal: we open/close this per-request in FastAPI
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base: parent class for all ORM models (tables)
Base = declarative_base()
