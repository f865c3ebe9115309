"""Persistence and local media storage."""

from .media_store import MediaStore
from .supabase import SupabasePersistence

__all__ = [
    "MediaStore",
    "SupabasePersistence",
]
