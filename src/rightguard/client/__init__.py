"""Client core: API gateway, client services, session store, and recorder."""

from .gateway import ApiGateway
from .services import RightGuardServices
from .state import AppState, AppStore
from .storage import JsonFileStorage, MemoryStorage, StorageService

__all__ = [
    "ApiGateway",
    "AppState",
    "AppStore",
    "JsonFileStorage",
    "MemoryStorage",
    "RightGuardServices",
    "StorageService",
]
