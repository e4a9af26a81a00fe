"""Services — validation, dependency graphs, version resolution, indexing."""
