# supabase_client.py
import os
from typing import Optional

from dotenv import load_dotenv
from supabase import Client, create_client

load_dotenv()

_client: Optional[Client] = None


def get_supabase_client() -> Client:
    """Shared client, built on first use from SUPABASE_URL / SUPABASE_KEY."""
    global _client
    if _client is None:
        url: str = os.getenv("SUPABASE_URL")
        key: str = os.getenv("SUPABASE_KEY")
        if not url or not key:
            raise RuntimeError("SUPABASE_URL and SUPABASE_KEY are not set in the environment")
        _client = create_client(url, key)
    return _client
