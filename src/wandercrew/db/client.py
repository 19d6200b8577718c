"""
WanderCrew - Supabase Client.

Low-level database access. Tables used by onboarding:
- profiles: committed user profiles
- onboarding_sessions: in-progress onboarding snapshots
"""

from supabase import Client, create_client

from wandercrew.config import settings

# Singleton client instance
_service_client: Client | None = None


def _require(value: str | None, name: str) -> str:
    if not value:
        raise RuntimeError(f"{name} is not configured")
    return value


def get_service_client() -> Client:
    """
    Get the Supabase client with the service role key.

    Bypasses row level security - server-side use only.
    Uses singleton pattern to reuse connection.
    """
    global _service_client

    if _service_client is None:
        _service_client = create_client(
            _require(settings.supabase_url, "SUPABASE_URL"),
            _require(settings.supabase_service_role_key, "SUPABASE_SERVICE_ROLE_KEY"),
        )

    return _service_client
