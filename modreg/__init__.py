"""
modreg — module registry tooling.

Validates module, component and application documents, builds dependency
graphs, resolves module versions and maintains the registry index.
"""

__version__ = "0.1.0"
