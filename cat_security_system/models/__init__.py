"""Data models for the cat security system."""

from .status import AlarmStatus, ArmingStatus, SensorType, Sensor
from .config import SystemConfig

__all__ = ['AlarmStatus', 'ArmingStatus', 'SensorType', 'Sensor', 'SystemConfig']
