"""Services for the cat security system."""

from .interfaces import (
    StateStoreInterface,
    ImageServiceInterface,
    StatusListener
)
from .security_service import SecurityService
from .state_store import SqliteStateStore, StateStoreError

__all__ = [
    'StateStoreInterface',
    'ImageServiceInterface',
    'StatusListener',
    'SecurityService',
    'SqliteStateStore',
    'StateStoreError'
]
