"""Supabase client construction."""

from supabase import Client, ClientOptions, create_client

from ragchat.core.config import Settings


def create_supabase(settings: Settings) -> Client:
    """
    Build a Supabase client from settings.

    Args:
        settings: Application settings with SUPABASE_URL / SUPABASE_ANON_KEY

    Returns:
        Supabase client with the PostgREST timeout bounded by
        RETRIEVAL_TIMEOUT_SECONDS

    Raises:
        RuntimeError: If client initialization fails (e.g. missing URL or key)
    """
    try:
        return create_client(
            settings.SUPABASE_URL,
            settings.SUPABASE_ANON_KEY,
            options=ClientOptions(
                postgrest_client_timeout=settings.RETRIEVAL_TIMEOUT_SECONDS,
            ),
        )
    except Exception as e:
        raise RuntimeError(f"Failed to initialize Supabase client: {e}") from e
