"""Core — models, services and use cases. No click, no terminal output."""
