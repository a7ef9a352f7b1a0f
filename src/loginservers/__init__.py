from loginservers.core.manager import LoginServerManager
from loginservers.core.models import LoginServer, ServerCatalog
from loginservers.core.storage import JsonFileStore, MemoryStore, StorageError

__all__ = [
    "JsonFileStore",
    "LoginServer",
    "LoginServerManager",
    "MemoryStore",
    "ServerCatalog",
    "StorageError",
]
