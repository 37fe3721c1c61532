from .memory_provider import InMemoryStore, read_file

__all__ = ["InMemoryStore", "read_file"]
