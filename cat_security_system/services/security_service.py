"""Security service: applies the alarm rules and notifies status listeners."""

import logging
import threading
from typing import Any, Dict, List, Optional, Set

from ..logging_config import get_logger, log_with_context
from ..models.status import AlarmStatus, ArmingStatus, Sensor, SensorType
from .error_handler import global_error_handler, ErrorSeverity
from .interfaces import ImageServiceInterface, NDArray, StateStoreInterface, StatusListener

logger = get_logger("security_service")

DEFAULT_CONFIDENCE_THRESHOLD = 50.0


class SecurityService:
    """Receives sensor, arming and camera updates and decides the alarm status.

    Current statuses and sensors live in the injected state store; the
    service only keeps its listeners and the last alarm status it
    broadcast. Listeners are called synchronously while the service lock
    is held, so they may call back into the service.
    """

    def __init__(self,
                 state_store: StateStoreInterface,
                 image_service: Optional[ImageServiceInterface] = None,
                 confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD):
        self.state_store = state_store
        self.image_service = image_service
        self.confidence_threshold = confidence_threshold

        self._status_listeners: Set[StatusListener] = set()
        self._lock = threading.RLock()
        self._current_alarm_status = state_store.get_alarm_status()
        self._last_cat_detected: Optional[bool] = None

        global_error_handler.register_component("security_service")

    # Arming and sensors

    def set_arming_status(self, arming_status: ArmingStatus) -> None:
        """Change the arming status.

        Disarming clears the alarm. Arming (home or away) first deactivates
        every active sensor.
        """
        with self._lock:
            log_with_context(logger, logging.INFO, "Arming status change requested",
                             {"from": self.get_arming_status().name, "to": arming_status.name})

            if arming_status == ArmingStatus.DISARMED:
                self.set_alarm_status(AlarmStatus.NO_ALARM)
            else:
                for sensor in [s for s in self.get_sensors() if s.active]:
                    self.change_sensor_activation(sensor, False)

            self.state_store.set_arming_status(arming_status)

    def change_sensor_activation(self, sensor: Sensor, active: bool) -> None:
        """Set a sensor's activation and apply the sensor rules."""
        with self._lock:
            sensor.active = active
            self.state_store.update_sensor(sensor)
            logger.info(f"Sensor {sensor.name} ({sensor.sensor_type.name}) "
                        f"{'activated' if active else 'deactivated'}")

            if active:
                self._handle_sensor_activated()
            else:
                self._handle_sensor_deactivated()

    def _handle_sensor_activated(self) -> None:
        if self.state_store.get_arming_status() != ArmingStatus.DISARMED:
            self.set_alarm_status(AlarmStatus.PENDING_ALARM)

    def _handle_sensor_deactivated(self) -> None:
        # ALARM is left alone; only disarming or an all-clear image step resets it
        if self.state_store.get_alarm_status() == AlarmStatus.PENDING_ALARM:
            self.set_alarm_status(AlarmStatus.NO_ALARM)

    def add_sensor(self, sensor: Sensor) -> None:
        self.state_store.add_sensor(sensor)

    def remove_sensor(self, sensor: Sensor) -> None:
        self.state_store.remove_sensor(sensor)

    def update_sensor(self, sensor: Sensor) -> None:
        self.state_store.update_sensor(sensor)

    # Camera images

    def process_image(self, image: NDArray) -> bool:
        """Classify a camera image and apply the cat detection rules.

        Returns:
            Whether a cat was detected

        Raises:
            RuntimeError: if no image service was configured
        """
        if self.image_service is None:
            raise RuntimeError("No image service configured")

        cat_detected = self.image_service.image_contains_cat(image, self.confidence_threshold)
        self.process_image_result(cat_detected)
        return cat_detected

    def process_image_result(self, cat_detected: bool) -> None:
        """Apply the alarm rules for a classified image and tell the listeners."""
        with self._lock:
            self._last_cat_detected = cat_detected
            self._update_alarm_status_for_image(cat_detected)

            for listener in list(self._status_listeners):
                self._call_listener(listener, "cat_detected", cat_detected)

    def _update_alarm_status_for_image(self, cat_detected: bool) -> None:
        arming_status = self.get_arming_status()

        if self._all_sensors_inactive():
            self.set_alarm_status(AlarmStatus.NO_ALARM)
        elif arming_status == ArmingStatus.ARMED_HOME and cat_detected:
            self.set_alarm_status(AlarmStatus.ALARM)
        elif arming_status != ArmingStatus.DISARMED:
            self.set_alarm_status(AlarmStatus.PENDING_ALARM)

    def _all_sensors_inactive(self) -> bool:
        return not any(sensor.active for sensor in self.get_sensors())

    # Alarm status and listeners

    def set_alarm_status(self, status: AlarmStatus) -> None:
        """Persist the alarm status and notify listeners if it changed."""
        with self._lock:
            self.state_store.set_alarm_status(status)

            if status != self._current_alarm_status:
                log_with_context(logger, logging.INFO, "Alarm status changed",
                                 {"from": getattr(self._current_alarm_status, "name", None),
                                  "to": status.name})
                for listener in list(self._status_listeners):
                    self._call_listener(listener, "notify", status)
                self._current_alarm_status = status

    def add_status_listener(self, listener: StatusListener) -> None:
        with self._lock:
            self._status_listeners.add(listener)

    def remove_status_listener(self, listener: StatusListener) -> None:
        with self._lock:
            self._status_listeners.discard(listener)

    def _call_listener(self, listener: StatusListener, method: str, value: Any) -> None:
        try:
            getattr(listener, method)(value)
        except Exception as e:
            global_error_handler.handle_error("security_service", e, ErrorSeverity.LOW)
            logger.warning(f"Status listener {listener!r} failed in {method}: {e}")

    # Reads

    def get_alarm_status(self) -> AlarmStatus:
        return self.state_store.get_alarm_status()

    def get_arming_status(self) -> ArmingStatus:
        return self.state_store.get_arming_status()

    def get_sensors(self) -> List[Sensor]:
        return list(self.state_store.get_sensors())

    def find_sensor(self, name: str, sensor_type: SensorType) -> Optional[Sensor]:
        return self.state_store.find_sensor(name, sensor_type)

    def get_status(self) -> Dict[str, Any]:
        """Snapshot of the current state for display."""
        with self._lock:
            alarm_status = self.get_alarm_status()
            arming_status = self.get_arming_status()
            return {
                'alarm_status': alarm_status.name,
                'alarm_description': alarm_status.description,
                'arming_status': arming_status.name,
                'arming_description': arming_status.description,
                'cat_detected': self._last_cat_detected,
                'sensors': [
                    {
                        'name': sensor.name,
                        'sensor_type': sensor.sensor_type.name,
                        'active': sensor.active
                    }
                    for sensor in self.get_sensors()
                ]
            }
