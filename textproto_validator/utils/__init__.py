"""Small shared helpers (logging setup, source locations)."""
