"""Shared Supabase client construction for the pipeline functions."""

from .connection import SupabaseConfig, get_supabase_client

__all__ = ["SupabaseConfig", "get_supabase_client"]
