"""Status and sensor data models."""

from dataclasses import dataclass, field
from enum import Enum


class AlarmStatus(Enum):
    """Alarm levels derived from arming status, sensors and cat detection."""
    NO_ALARM = "Cool and Good"
    PENDING_ALARM = "I'm in Danger..."
    ALARM = "Awoogah!"

    @property
    def description(self) -> str:
        return self.value


class ArmingStatus(Enum):
    """Whether the system is monitoring, and in which mode."""
    DISARMED = "Disarmed"
    ARMED_HOME = "Armed - At Home"
    ARMED_AWAY = "Armed - Away"

    @property
    def description(self) -> str:
        return self.value


class SensorType(Enum):
    """Kinds of binary sensors."""
    DOOR = "door"
    WINDOW = "window"
    MOTION = "motion"


@dataclass(eq=False)
class Sensor:
    """A door, window or motion sensor.

    Identity is name + type so a sensor keeps its place in sets
    while ``active`` is flipped in place.
    """
    name: str
    sensor_type: SensorType
    active: bool = field(default=False)

    @property
    def key(self) -> tuple:
        return (self.name, self.sensor_type.name)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Sensor):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __lt__(self, other: "Sensor") -> bool:
        return self.key < other.key
