"""Supabase client factory.

``create_supabase()`` builds a new client from ``settings`` each time it is
called.  The application owns exactly one, created by the record store
when the lifespan opens it.
"""

from supabase import Client, create_client

from app.core.config import Settings, settings


def create_supabase(config: Settings = settings) -> Client:
    """Return a new Supabase client for the configured project."""
    return create_client(config.SUPABASE_URL, config.SUPABASE_KEY)
