"""SQLite-backed key-value store for sensors, alarm status and arming status."""

import json
import os
import sqlite3
import threading
from typing import Dict, List, Optional

from ..config.defaults import STORE_KEYS
from ..logging_config import get_logger
from ..models.status import AlarmStatus, ArmingStatus, Sensor, SensorType
from ..utils import ensure_directory_exists
from .interfaces import StateStoreInterface

logger = get_logger("state_store")


class StateStoreError(Exception):
    """Raised when persisted state cannot be loaded."""


class SqliteStateStore(StateStoreInterface):
    """State store that keeps preferences as key/value rows in SQLite.

    State is loaded once at construction and every change is written
    through. Sensors are kept as a JSON list of tagged records.
    """

    def __init__(self, database_path: str = "data/security.db"):
        self.database_path = database_path
        self._lock = threading.RLock()

        self._sensors: Dict[tuple, Sensor] = {}
        self._alarm_status = AlarmStatus.NO_ALARM
        self._arming_status = ArmingStatus.DISARMED

        self._initialize_database()
        self._load_state()

    def get_sensors(self) -> List[Sensor]:
        with self._lock:
            return sorted(self._sensors.values())

    def add_sensor(self, sensor: Sensor) -> None:
        with self._lock:
            self._sensors[sensor.key] = sensor
            self._save_sensors()
        logger.info(f"Added sensor {sensor.name} ({sensor.sensor_type.name})")

    def remove_sensor(self, sensor: Sensor) -> None:
        with self._lock:
            self._sensors.pop(sensor.key, None)
            self._save_sensors()
        logger.info(f"Removed sensor {sensor.name} ({sensor.sensor_type.name})")

    def update_sensor(self, sensor: Sensor) -> None:
        with self._lock:
            self._sensors[sensor.key] = sensor
            self._save_sensors()
        logger.debug(f"Updated sensor {sensor.name}: active={sensor.active}")

    def get_alarm_status(self) -> AlarmStatus:
        with self._lock:
            return self._alarm_status

    def set_alarm_status(self, status: AlarmStatus) -> None:
        with self._lock:
            self._alarm_status = status
            self._put(STORE_KEYS["alarm_status"], status.name)

    def get_arming_status(self) -> ArmingStatus:
        with self._lock:
            return self._arming_status

    def set_arming_status(self, status: ArmingStatus) -> None:
        with self._lock:
            self._arming_status = status
            self._put(STORE_KEYS["arming_status"], status.name)

    def find_sensor(self, name: str, sensor_type: SensorType) -> Optional[Sensor]:
        """Look up a stored sensor by its identity."""
        with self._lock:
            return self._sensors.get((name, sensor_type.name))

    def _initialize_database(self) -> None:
        """Create the database directory and preferences table."""
        directory = os.path.dirname(self.database_path)
        if directory:
            ensure_directory_exists(directory)

        with sqlite3.connect(self.database_path) as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS preferences (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
            """)
            conn.commit()

        logger.debug(f"State database initialized at {self.database_path}")

    def _load_state(self) -> None:
        """Load persisted state, failing fast on malformed values."""
        alarm_value = self._get(STORE_KEYS["alarm_status"])
        arming_value = self._get(STORE_KEYS["arming_status"])
        sensors_value = self._get(STORE_KEYS["sensors"])

        if alarm_value is not None:
            self._alarm_status = self._parse_enum(AlarmStatus, alarm_value)
        if arming_value is not None:
            self._arming_status = self._parse_enum(ArmingStatus, arming_value)
        if sensors_value is not None:
            sensors = self._deserialize_sensors(sensors_value)
            self._sensors = {sensor.key: sensor for sensor in sensors}

        logger.info(f"Loaded state: alarm={self._alarm_status.name}, "
                    f"arming={self._arming_status.name}, sensors={len(self._sensors)}")

    def _get(self, key: str) -> Optional[str]:
        with sqlite3.connect(self.database_path) as conn:
            row = conn.execute("SELECT value FROM preferences WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    def _put(self, key: str, value: str) -> None:
        with sqlite3.connect(self.database_path) as conn:
            conn.execute("INSERT OR REPLACE INTO preferences (key, value) VALUES (?, ?)", (key, value))
            conn.commit()

    def _save_sensors(self) -> None:
        self._put(STORE_KEYS["sensors"], self._serialize_sensors(self._sensors.values()))

    @staticmethod
    def _parse_enum(enum_cls, value: str):
        try:
            return enum_cls[value]
        except KeyError:
            raise StateStoreError(f"Invalid stored {enum_cls.__name__}: {value!r}") from None

    @staticmethod
    def _serialize_sensors(sensors) -> str:
        return json.dumps([
            {
                'name': sensor.name,
                'sensor_type': sensor.sensor_type.name,
                'active': sensor.active
            }
            for sensor in sorted(sensors)
        ])

    @classmethod
    def _deserialize_sensors(cls, sensors_json: str) -> List[Sensor]:
        try:
            records = json.loads(sensors_json)
        except json.JSONDecodeError as e:
            raise StateStoreError(f"Invalid stored sensors: {e}") from e

        if not isinstance(records, list):
            raise StateStoreError("Invalid stored sensors: expected a list")

        sensors = []
        for record in records:
            if not isinstance(record, dict):
                raise StateStoreError(f"Invalid stored sensor record {record!r}")

            name = record.get('name')
            sensor_type = record.get('sensor_type')
            active = record.get('active', False)
            if not isinstance(name, str) or not name:
                raise StateStoreError(f"Invalid stored sensor name in {record!r}")
            if not isinstance(sensor_type, str):
                raise StateStoreError(f"Invalid stored sensor type in {record!r}")
            if not isinstance(active, bool):
                raise StateStoreError(f"Invalid stored sensor activation in {record!r}")

            sensors.append(Sensor(
                name=name,
                sensor_type=cls._parse_enum(SensorType, sensor_type),
                active=active
            ))
        return sensors
