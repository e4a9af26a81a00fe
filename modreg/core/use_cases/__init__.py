"""Use cases — one entry point per CLI command, returning result objects."""
