from functools import lru_cache

from supabase import create_client, Client

from nutrilife.core.config import settings


@lru_cache(maxsize=1)
def get_supabase() -> Client:
    url: str = settings.SUPABASE_URL
    key: str = settings.SUPABASE_SERVICE_KEY

    if not url or not key:
        raise EnvironmentError("Supabase URL and Key must be set in .env file")

    return create_client(url, key)
