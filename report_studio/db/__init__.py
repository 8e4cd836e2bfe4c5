"""Database module initialization."""
from .supabase_store import SupabaseStore, create_store

__all__ = ['SupabaseStore', 'create_store']
