"""Typed views of rows stored in the external Supabase table."""
