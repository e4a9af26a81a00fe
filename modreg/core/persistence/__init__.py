"""Persistence — reading and atomically writing the registry index file."""
