# app/core/supabase_client.py
from functools import lru_cache

from supabase import create_client, Client

from app.core.config import get_settings


def _create(key: str | None, key_name: str) -> Client:
    settings = get_settings()
    if not settings.SUPABASE_URL or not key:
        raise RuntimeError(f"Missing SUPABASE_URL / {key_name} in .env")
    return create_client(settings.SUPABASE_URL, key)


@lru_cache
def supabase_public() -> Client:
    """
    Anon-key client for Supabase Auth (sign up, sign in).
    Created on first use so the API boots without Supabase credentials.
    """
    return _create(get_settings().SUPABASE_KEY, "SUPABASE_KEY")


@lru_cache
def supabase_admin() -> Client:
    """
    Service-role client for the media bucket. Server-side only.
    """
    return _create(get_settings().SUPABASE_SERVICE_ROLE_KEY, "SUPABASE_SERVICE_ROLE_KEY")
