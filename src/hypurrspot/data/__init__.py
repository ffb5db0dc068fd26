"""Data layer: pydantic models and Supabase persistence."""
