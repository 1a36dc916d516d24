"""Default configuration values and constants."""

# Supported image service implementations
IMAGE_SERVICES = ("opencv", "fake")

# File paths and directories
DEFAULT_PATHS = {
    "config_file": "security_config.json"
}

# Keys of the persisted state in the preferences table
STORE_KEYS = {
    "sensors": "SENSORS",
    "alarm_status": "ALARM_STATUS",
    "arming_status": "ARMING_STATUS"
}

# Haar cascade classifier settings
CLASSIFIER_SETTINGS = {
    "cascade_files": (
        "haarcascade_frontalcatface.xml",
        "haarcascade_frontalcatface_extended.xml"
    ),
    "scale_factor": 1.1,
    "min_neighbors": 3,
    "min_size": (30, 30),
    "max_size": (300, 300),
    "blur_kernel_size": 3,
    "contrast_alpha": 1.2,
    "brightness_beta": 10
}
