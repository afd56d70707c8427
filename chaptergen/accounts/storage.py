"""Supabase client factory."""

from __future__ import annotations

from supabase import Client, create_client

from chaptergen.config import settings


def get_supabase_client() -> Client:
    """Create and return a Supabase client from settings."""
    return create_client(settings.supabase_url, settings.supabase_key)
