"""Boxship: shipping box registry with per-destination cost calculation."""
