"""Service interfaces and abstract base classes."""

from abc import ABC, abstractmethod
from typing import List, Optional

import numpy as np

from ..models.status import AlarmStatus, ArmingStatus, Sensor, SensorType

NDArray = np.ndarray


class StateStoreInterface(ABC):
    """Interface for the persisted security state."""

    @abstractmethod
    def get_sensors(self) -> List[Sensor]:
        """Get all known sensors."""
        pass

    @abstractmethod
    def find_sensor(self, name: str, sensor_type: SensorType) -> Optional[Sensor]:
        """Get the sensor with this name and type, or None."""
        pass

    @abstractmethod
    def add_sensor(self, sensor: Sensor) -> None:
        """Add a sensor."""
        pass

    @abstractmethod
    def remove_sensor(self, sensor: Sensor) -> None:
        """Remove a sensor."""
        pass

    @abstractmethod
    def update_sensor(self, sensor: Sensor) -> None:
        """Replace the stored sensor with the same identity."""
        pass

    @abstractmethod
    def get_alarm_status(self) -> AlarmStatus:
        """Get the current alarm status."""
        pass

    @abstractmethod
    def set_alarm_status(self, status: AlarmStatus) -> None:
        """Persist the alarm status."""
        pass

    @abstractmethod
    def get_arming_status(self) -> ArmingStatus:
        """Get the current arming status."""
        pass

    @abstractmethod
    def set_arming_status(self, status: ArmingStatus) -> None:
        """Persist the arming status."""
        pass


class ImageServiceInterface(ABC):
    """Interface for camera image classification."""

    @abstractmethod
    def image_contains_cat(self, image: NDArray, confidence_threshold: float) -> bool:
        """Return True if a cat is found with at least the given confidence (percent)."""
        pass


class StatusListener(ABC):
    """Receives alarm status and cat detection updates."""

    @abstractmethod
    def notify(self, status: AlarmStatus) -> None:
        """Called when the alarm status changes."""
        pass

    @abstractmethod
    def cat_detected(self, cat_detected: bool) -> None:
        """Called after every processed camera image."""
        pass
