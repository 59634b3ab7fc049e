from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from .config import settings


def get_database_url() -> str:
    """Get database URL, preferring an explicit DATABASE_URL."""
    if settings.DATABASE_URL:
        return settings.DATABASE_URL

    base_url = (
        f"postgresql+psycopg2://{settings.POSTGRES_USER}:"
        f"{settings.POSTGRES_PASSWORD}@{settings.POSTGRES_HOST}:"
        f"{settings.POSTGRES_PORT}/{settings.POSTGRES_DB}"
    )

    # Hosted databases require SSL outside local development
    if settings.ENVIRONMENT.lower() in ("production", "staging"):
        base_url += "?sslmode=require"

    return base_url


def _engine_options(url: str) -> dict:
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True}

    options: dict = {"connect_args": {"check_same_thread": False}}
    # An in-memory database lives as long as its single connection
    if url in ("sqlite://", "sqlite:///:memory:"):
        options["poolclass"] = StaticPool
    return options


DATABASE_URL = get_database_url()

engine = create_engine(DATABASE_URL, **_engine_options(DATABASE_URL))
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
