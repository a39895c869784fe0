"""Shared Supabase connection utilities.

This module provides Supabase client creation for every pipeline function
(stage workers, housekeeping jobs and the health monitor).
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Optional

from supabase import Client, create_client
from supabase.client import ClientOptions

from src.shared.utils.config_validator import optional_env, require_env

logger = logging.getLogger(__name__)


@dataclass
class SupabaseConfig:
    """Configuration for Supabase connection.

    Attributes:
        url: Supabase project URL
        key: Supabase API key (service role for background jobs)
        schema: Database schema to use (default: public)
    """
    url: str
    key: str
    schema: str = "public"

    @classmethod
    def from_env(
        cls,
        url_var: str = "SUPABASE_URL",
        key_var: str = "SUPABASE_SERVICE_ROLE_KEY",
        schema_var: str = "SUPABASE_SCHEMA"
    ) -> SupabaseConfig:
        """Create configuration from environment variables.

        The key falls back to SUPABASE_KEY when the service role variable is unset.

        Raises:
            ConfigurationError: If required environment variables are not set
        """
        url = require_env(url_var, "Supabase project URL")
        key = require_env(key_var, "Supabase service role key", fallbacks=("SUPABASE_KEY",))
        schema = optional_env(schema_var) or "public"
        return cls(url=url, key=key, schema=schema)


def get_supabase_client(config: Optional[SupabaseConfig] = None) -> Client:
    """Create Supabase client.

    Args:
        config: Optional SupabaseConfig. If None, loads from environment.

    Returns:
        Supabase client instance

    Example:
        >>> client = get_supabase_client()
        >>> response = client.table("content_blocks").select("*").limit(5).execute()
    """
    if config is None:
        config = SupabaseConfig.from_env()

    logger.debug(f"Creating Supabase client for {config.url}")

    if config.schema and config.schema != "public":
        logger.debug(f"Using schema: {config.schema}")
        return create_client(config.url, config.key, options=ClientOptions(schema=config.schema))

    return create_client(config.url, config.key)
