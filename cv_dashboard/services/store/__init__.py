"""Adapter over the managed record store (Supabase table + storage bucket)."""

from cv_dashboard.services.store.client import SupabaseClient, eq, ilike_any

__all__ = ["SupabaseClient", "eq", "ilike_any"]
