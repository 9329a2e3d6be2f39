"""Storage module - provides interfaces and implementations for data persistence."""

from .interface import StorageInterface, SessionStoreInterface
from .local_storage import LocalStorage
from .session_store import (
    SessionStore,
    SessionStoreError,
    SessionNotFoundError,
    InvalidStatusTransition,
    init_session_store,
    get_session_store,
)
from .limit_storage import DoubtLimitStorage, LimitCheck, init_limit_storage, get_limit_storage

__all__ = [
    'StorageInterface', 'SessionStoreInterface', 'LocalStorage',
    'SessionStore', 'SessionStoreError', 'SessionNotFoundError', 'InvalidStatusTransition',
    'init_session_store', 'get_session_store',
    'DoubtLimitStorage', 'LimitCheck', 'init_limit_storage', 'get_limit_storage',
]
