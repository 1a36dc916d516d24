"""Configuration data models."""

from dataclasses import dataclass


@dataclass
class SystemConfig:
    """System configuration settings."""
    # Image classification settings
    confidence_threshold: float = 50.0  # Percent, 0-100
    image_service: str = "opencv"  # opencv, fake
    cascade_path: str = ""  # Empty uses the cascades bundled with OpenCV

    # Storage settings
    database_path: str = "data/security.db"

    # Logging settings
    log_level: str = "INFO"
    log_dir: str = "logs"

    # Web settings
    web_host: str = "0.0.0.0"
    web_port: int = 5000
