from .base import (
    HierarchyStorage,
    NoteSettingsStorage,
    NoteStorage,
    StorageBackend,
    TeamStorage,
)
from .memory import MemoryBackend

__all__ = [
    "StorageBackend",
    "NoteStorage",
    "HierarchyStorage",
    "TeamStorage",
    "NoteSettingsStorage",
    "MemoryBackend",
]
