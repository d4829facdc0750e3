"""Attendance Hub authentication backend: Google sign-in via Supabase with signed session cookies."""

__version__ = "1.0.0"
