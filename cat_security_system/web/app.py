"""Flask JSON API for the cat security system."""

import threading
from collections import deque
from datetime import datetime
from typing import Any, Dict, List, Optional

from flask import Flask, jsonify, request

from ..config_manager import ConfigManager
from ..logging_config import get_logger
from ..models.status import AlarmStatus, ArmingStatus, Sensor, SensorType
from ..services.error_handler import global_error_handler, ErrorSeverity
from ..services.image_service import FakeImageService, OpenCVImageService
from ..services.interfaces import StatusListener
from ..services.security_service import SecurityService
from ..services.state_store import SqliteStateStore
from ..utils import decode_image, format_timestamp

logger = get_logger("web_app")

MAX_EVENTS = 100


class EventLogListener(StatusListener):
    """Keeps the most recent status messages for display."""

    def __init__(self, max_events: int = MAX_EVENTS):
        self._events = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def notify(self, status: AlarmStatus) -> None:
        self._record("alarm_status", f"Alarm status: {status.description}", status.name)

    def cat_detected(self, cat_detected: bool) -> None:
        if cat_detected:
            message = "DANGER - CAT DETECTED"
        else:
            message = "Camera shows no cats"
        self._record("cat_detected", message, cat_detected)

    def get_events(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Most recent events first."""
        with self._lock:
            events = list(reversed(self._events))
        if limit is not None:
            events = events[:max(0, limit)]
        return events

    def _record(self, event_type: str, message: str, value: Any) -> None:
        with self._lock:
            self._events.append({
                'timestamp': format_timestamp(datetime.now()),
                'type': event_type,
                'message': message,
                'value': value
            })


def _parse_enum(enum_cls, value: Any):
    """Look up an enum member by name, raising ValueError on unknown names."""
    if not isinstance(value, str):
        raise ValueError(f"{enum_cls.__name__} must be a string")
    try:
        return enum_cls[value.upper()]
    except KeyError:
        choices = ", ".join(member.name for member in enum_cls)
        raise ValueError(f"Unknown {enum_cls.__name__} {value!r}; expected one of {choices}") from None


def _sensor_dict(sensor: Sensor) -> Dict[str, Any]:
    return {
        'name': sensor.name,
        'sensor_type': sensor.sensor_type.name,
        'active': sensor.active
    }


class SecurityWebApp:
    """Flask application exposing the security service operations."""

    def __init__(self, service: SecurityService, config_manager: Optional[ConfigManager] = None):
        self.app = Flask(__name__)
        self.service = service
        self.config_manager = config_manager

        self.event_listener = EventLogListener()
        self.service.add_status_listener(self.event_listener)

        self.app.config['MAX_CONTENT_LENGTH'] = 16 * 1024 * 1024  # 16MB max upload

        global_error_handler.register_component("web_app")
        self._setup_routes()

        logger.info("Security web application initialized")

    def _find_sensor(self, sensor_type: str, name: str) -> Optional[Sensor]:
        return self.service.find_sensor(name, _parse_enum(SensorType, sensor_type))

    @staticmethod
    def _bad_request(error: Exception):
        return jsonify({'success': False, 'error': str(error)}), 400

    @staticmethod
    def _server_error(action: str, error: Exception):
        global_error_handler.handle_error("web_app", error, ErrorSeverity.MEDIUM)
        logger.error(f"Error {action}: {error}")
        return jsonify({'success': False, 'error': str(error)}), 500

    def _setup_routes(self):
        """Setup Flask routes."""

        @self.app.route('/api/status')
        def api_status():
            """Get alarm, arming and sensor status."""
            try:
                return jsonify({'success': True, 'data': self.service.get_status()})
            except Exception as e:
                return self._server_error("getting status", e)

        @self.app.route('/api/arming', methods=['POST'])
        def api_set_arming():
            """Change the arming status."""
            data = request.get_json(silent=True) or {}
            try:
                arming_status = _parse_enum(ArmingStatus, data.get('status'))
            except ValueError as e:
                return self._bad_request(e)

            try:
                self.service.set_arming_status(arming_status)
                return jsonify({
                    'success': True,
                    'message': f'Arming status set to {arming_status.name}',
                    'data': self.service.get_status()
                })
            except Exception as e:
                return self._server_error("setting arming status", e)

        @self.app.route('/api/alarm', methods=['POST'])
        def api_set_alarm():
            """Set the alarm status directly."""
            data = request.get_json(silent=True) or {}
            try:
                alarm_status = _parse_enum(AlarmStatus, data.get('status'))
            except ValueError as e:
                return self._bad_request(e)

            try:
                self.service.set_alarm_status(alarm_status)
                return jsonify({
                    'success': True,
                    'message': f'Alarm status set to {alarm_status.name}'
                })
            except Exception as e:
                return self._server_error("setting alarm status", e)

        @self.app.route('/api/sensors', methods=['GET'])
        def api_get_sensors():
            """List sensors."""
            try:
                sensors = [_sensor_dict(sensor) for sensor in self.service.get_sensors()]
                return jsonify({'success': True, 'data': sensors})
            except Exception as e:
                return self._server_error("listing sensors", e)

        @self.app.route('/api/sensors', methods=['POST'])
        def api_add_sensor():
            """Add a sensor."""
            data = request.get_json(silent=True) or {}
            name = data.get('name')
            if not isinstance(name, str) or not name.strip():
                return self._bad_request(ValueError("Sensor name is required"))

            try:
                sensor_type = _parse_enum(SensorType, data.get('sensor_type'))
            except ValueError as e:
                return self._bad_request(e)

            sensor = Sensor(name=name.strip(), sensor_type=sensor_type,
                            active=bool(data.get('active', False)))
            try:
                self.service.add_sensor(sensor)
                return jsonify({'success': True, 'data': _sensor_dict(sensor)}), 201
            except Exception as e:
                return self._server_error("adding sensor", e)

        @self.app.route('/api/sensors/<sensor_type>/<name>', methods=['DELETE'])
        def api_remove_sensor(sensor_type, name):
            """Remove a sensor."""
            try:
                sensor = self._find_sensor(sensor_type, name)
            except ValueError as e:
                return self._bad_request(e)
            if sensor is None:
                return jsonify({'success': False, 'error': 'Sensor not found'}), 404

            try:
                self.service.remove_sensor(sensor)
                return jsonify({'success': True, 'message': f'Sensor {name} removed'})
            except Exception as e:
                return self._server_error("removing sensor", e)

        @self.app.route('/api/sensors/<sensor_type>/<name>/activation', methods=['POST'])
        def api_change_activation(sensor_type, name):
            """Activate or deactivate a sensor."""
            data = request.get_json(silent=True) or {}
            active = data.get('active')
            if not isinstance(active, bool):
                return self._bad_request(ValueError("'active' must be true or false"))

            try:
                sensor = self._find_sensor(sensor_type, name)
            except ValueError as e:
                return self._bad_request(e)
            if sensor is None:
                return jsonify({'success': False, 'error': 'Sensor not found'}), 404

            try:
                self.service.change_sensor_activation(sensor, active)
                return jsonify({'success': True, 'data': self.service.get_status()})
            except Exception as e:
                return self._server_error("changing sensor activation", e)

        @self.app.route('/api/image', methods=['POST'])
        def api_process_image():
            """Classify an uploaded camera picture."""
            upload = request.files.get('image')
            data = upload.read() if upload is not None else request.get_data()
            try:
                image = decode_image(data)
            except ValueError as e:
                return self._bad_request(e)

            try:
                cat_detected = self.service.process_image(image)
                return jsonify({
                    'success': True,
                    'data': {
                        'cat_detected': cat_detected,
                        'alarm_status': self.service.get_alarm_status().name
                    }
                })
            except Exception as e:
                return self._server_error("processing image", e)

        @self.app.route('/api/image-result', methods=['POST'])
        def api_process_image_result():
            """Apply an externally classified cat detection result."""
            data = request.get_json(silent=True) or {}
            cat_detected = data.get('cat_detected')
            if not isinstance(cat_detected, bool):
                return self._bad_request(ValueError("'cat_detected' must be true or false"))

            try:
                self.service.process_image_result(cat_detected)
                return jsonify({'success': True, 'data': self.service.get_status()})
            except Exception as e:
                return self._server_error("processing image result", e)

        @self.app.route('/api/events')
        def api_events():
            """Recent alarm and cat detection messages."""
            limit = request.args.get('limit', MAX_EVENTS, type=int)
            return jsonify({'success': True, 'data': self.event_listener.get_events(limit)})

        @self.app.route('/api/health')
        def api_health():
            """Error summary per component."""
            return jsonify({
                'success': True,
                'data': global_error_handler.get_error_summary()
            })

    def run(self, host='0.0.0.0', port=5000, debug=False):
        """Run the Flask application."""
        logger.info(f"Starting security web interface on {host}:{port}")
        self.app.run(host=host, port=port, debug=debug, threaded=True)

    def get_app(self):
        """Get the Flask app instance for external WSGI servers."""
        return self.app


def create_service(config_manager: ConfigManager) -> SecurityService:
    """Build the security service described by the configuration."""
    config = config_manager.get_config()
    state_store = SqliteStateStore(config.database_path)

    if config.image_service == "fake":
        image_service = FakeImageService()
    else:
        image_service = OpenCVImageService(config.cascade_path or None)

    return SecurityService(state_store, image_service, config.confidence_threshold)


def create_app(service: Optional[SecurityService] = None,
               config_manager: Optional[ConfigManager] = None) -> Flask:
    """Factory function to create Flask app."""
    if service is None:
        config_manager = config_manager or ConfigManager()
        service = create_service(config_manager)
    web_app = SecurityWebApp(service, config_manager)
    return web_app.get_app()
