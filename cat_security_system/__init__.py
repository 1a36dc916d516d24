"""
Cat Security System

A home security status manager that tracks door, window and motion
sensors, arming and alarm status, and escalates alarms when a camera
sees a cat while the house is armed.
"""

__version__ = "1.0.0"
__author__ = "Cat Security System"

# Import core components
from .config_manager import ConfigManager
from .models import (
    AlarmStatus,
    ArmingStatus,
    SensorType,
    Sensor,
    SystemConfig
)
from .services import (
    StateStoreInterface,
    ImageServiceInterface,
    StatusListener,
    SecurityService,
    SqliteStateStore,
    StateStoreError
)

__all__ = [
    # Core management
    'ConfigManager',

    # Data models
    'AlarmStatus',
    'ArmingStatus',
    'SensorType',
    'Sensor',
    'SystemConfig',

    # Services
    'StateStoreInterface',
    'ImageServiceInterface',
    'StatusListener',
    'SecurityService',
    'SqliteStateStore',
    'StateStoreError'
]
