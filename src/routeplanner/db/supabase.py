"""Supabase client for Python backend."""

import logging

from supabase import create_client, Client

from ..config import ConfigurationError, Settings


def get_supabase_client(settings: Settings) -> Client:
    """Create a Supabase client from explicit settings.

    Note: This does not test the connection - actual queries may fail with network errors.

    Raises:
        ConfigurationError: if the URL or key is missing, or the client
            cannot be constructed from them.
    """
    url, key = settings.require_supabase()
    try:
        return create_client(url, key)
    except Exception as e:
        logging.error(f"Failed to create Supabase client: {e}")
        raise ConfigurationError(f"Failed to create Supabase client: {e}") from e
