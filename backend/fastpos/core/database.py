"""
Local and remote storage connections

This module centralizes the two ways FastPOS persists data:
- SQLAlchemy over SQLite (local persistent storage, always available)
- Supabase client (remote mirror, only when credentials are configured)

Author: TM3
Updated: 2026-10-19
"""
import logging
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import settings

logger = logging.getLogger(__name__)


# ============================================================================
# SQLAlchemy Configuration (local store)
# ============================================================================

# Base para modelos
Base = declarative_base()


def create_local_engine(database_url: Optional[str] = None) -> Engine:
    """
    Create the SQLAlchemy engine for the local store

    Remote writes resolve on worker threads, so SQLite connections must be
    shareable across threads. In-memory databases use a single static
    connection so every session sees the same data.

    Args:
        database_url: SQLAlchemy URL (defaults to settings.LOCAL_DATABASE_URL)

    Returns:
        SQLAlchemy Engine
    """
    url = database_url or settings.LOCAL_DATABASE_URL

    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, **kwargs)

    return create_engine(url, pool_pre_ping=True)


def create_session_factory(engine: Engine) -> sessionmaker:
    """
    Build a session factory and make sure all tables exist

    Usage:
        SessionLocal = create_session_factory(create_local_engine())
        with SessionLocal() as session:
            ...
    """
    # Import models so they register on Base.metadata
    from fastpos import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


# ============================================================================
# Supabase Client (remote store)
# ============================================================================

def get_supabase_client(url: Optional[str] = None, key: Optional[str] = None):
    """
    Create a Supabase client when credentials are configured

    Missing credentials are not an error: the system runs purely on the
    local store.

    Returns:
        supabase.Client or None (offline mode)
    """
    url = url if url is not None else settings.SUPABASE_URL
    key = key if key is not None else settings.SUPABASE_ANON_KEY

    if not url or not key:
        logger.warning("Supabase URL or key missing - running in offline mode (local storage only)")
        return None

    from supabase import create_client

    try:
        return create_client(url, key)
    except Exception as e:
        logger.error(f"Could not create Supabase client, falling back to offline mode: {e}")
        return None
